import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Board shape for every new game
    GRID_WIDTH = int(os.environ.get('GRID_WIDTH', '10'))
    GRID_HEIGHT = int(os.environ.get('GRID_HEIGHT', '10'))
    MINE_COUNT = int(os.environ.get('MINE_COUNT', '15'))
    # Largest board /api/boards will regenerate (width * height)
    MAX_BOARD_CELLS = int(os.environ.get('MAX_BOARD_CELLS', '10000'))
    # 'bot-immediate' pairs test-mode joins with the bot; 'peer-queued' pairs them with each other
    MATCHMAKING_POLICY = os.environ.get('MATCHMAKING_POLICY', 'bot-immediate')
    # Bot timings (ms) and chance of cosmetic output
    BOT_THINK_MIN_MS = int(os.environ.get('BOT_THINK_MIN_MS', '1000'))
    BOT_THINK_MAX_MS = int(os.environ.get('BOT_THINK_MAX_MS', '2000'))
    BOT_TURN_HANDOFF_MS = int(os.environ.get('BOT_TURN_HANDOFF_MS', '500'))
    BOT_REACTION_PROBABILITY = float(os.environ.get('BOT_REACTION_PROBABILITY', '0.3'))
    BOT_REACTION_DELAY_MS = int(os.environ.get('BOT_REACTION_DELAY_MS', '500'))
    BOT_CHAT_REPLY_PROBABILITY = float(os.environ.get('BOT_CHAT_REPLY_PROBABILITY', '0.4'))
    BOT_CHAT_DELAY_MIN_MS = int(os.environ.get('BOT_CHAT_DELAY_MIN_MS', '1000'))
    BOT_CHAT_DELAY_MAX_MS = int(os.environ.get('BOT_CHAT_DELAY_MAX_MS', '3000'))
    # Finished games stay readable this long before eviction (seconds)
    FINISHED_GAME_TTL_SEC = int(os.environ.get('FINISHED_GAME_TTL_SEC', '30'))
    CHAT_MAX_LENGTH = int(os.environ.get('CHAT_MAX_LENGTH', '100'))
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    PORT = int(os.environ.get('PORT', '3001'))
