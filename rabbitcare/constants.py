# --- GLOBAL CONFIGURATION ---
SCREEN_WIDTH = 480
SCREEN_HEIGHT = 320
FPS = 30
DB_FILE = "rabbit_care.db"
STORAGE_NAMESPACE = "rabbit-care"
PLAYER_ID_KEY = "rabbit-care-player-id"
API_BASE = "http://localhost:3001/api"
SCHEMA_VERSION = 3

# --- CARE STATS (0 = bad, 2 = best) ---
MIN_LEVEL = 0
MAX_LEVEL = 2

# --- TIMING (milliseconds) ---
DECAY_INTERVAL_MS = 60 * 1000
IDLE_DECAY_MS = 2 * 60 * 1000     # idle-only mode: no decay until this long without interaction
SYNC_INTERVAL_MS = 30 * 1000
DAILY_GIFT_COOLDOWN_MS = 24 * 60 * 60 * 1000
REQUEST_TIMEOUT = 8.0  # seconds

# --- REWARDS (in Hearts) ---
FEED_REWARD = 5
CLEAN_REWARD = 5
SCOOP_REWARD = 2
PET_REWARD = 3
DAILY_GIFT_MIN = 50
DAILY_GIFT_MAX = 100
XP_PER_LEVEL = 100

# --- POOPS ---
MAX_POOPS = 10
POOP_SPAWN_CHANCE = 1.0  # per decay tick, while not spotless
POOP_X_RANGE = (10.0, 90.0)   # percent of the room width
POOP_Y_RANGE = (5.0, 25.0)    # percent from the floor

# --- STICKERS ---
STICKER_MIN_SCALE = 0.5
STICKER_MAX_SCALE = 6.0

# --- WARDROBE (Prices in Hearts) ---
SLOTS = ('head', 'body', 'hand')

SHOP_ITEMS = {
    'head': [
        {'id': 'blue-hat', 'name': 'Blue Hat', 'price': 50, 'icon_path': 'pixel/hat_blue.png'},
        {'id': 'flower-crown', 'name': 'Flower Crown', 'price': 60, 'icon_path': 'pixel/flower_crown.png'},
        {'id': 'bunny-bow', 'name': 'Bunny Bow', 'price': 40, 'icon_path': 'pixel/bow_pink.png'},
    ],
    'body': [
        {'id': 'pink-dress', 'name': 'Pink Dress', 'price': 50, 'icon_path': 'pixel/dress_pink.png'},
        {'id': 'star-cape', 'name': 'Star Cape', 'price': 80, 'icon_path': 'pixel/cape_star.png'},
        {'id': 'rain-coat', 'name': 'Rain Coat', 'price': 70, 'icon_path': 'pixel/coat_rain.png'},
    ],
    'hand': [
        {'id': 'carrot-wand', 'name': 'Carrot Wand', 'price': 30, 'icon_path': 'pixel/wand_carrot.png'},
        {'id': 'balloon', 'name': 'Balloon', 'price': 25, 'icon_path': 'pixel/balloon.png'},
        {'id': 'teddy', 'name': 'Teddy Bear', 'price': 90, 'icon_path': 'pixel/teddy.png'},
    ],
}

BACKGROUND_UNLOCK_COST = 100
DEFAULT_BACKGROUND = 'room'

BACKGROUNDS = [
    {'id': 'room', 'name': 'Cozy Room', 'icon_path': 'pixel/bg_room.png', 'color': (252, 231, 243)},
    {'id': 'garden', 'name': 'Garden', 'icon_path': 'pixel/bg_garden.png', 'color': (187, 247, 208)},
    {'id': 'beach', 'name': 'Beach', 'icon_path': 'pixel/bg_beach.png', 'color': (125, 211, 252)},
]

# --- RETRO UI PALETTE ---
COLOR_TEXT = (60, 40, 60)
COLOR_WARNING = (224, 108, 117)
