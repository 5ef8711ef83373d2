# seconds
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_MAX_STARTUP_SECONDS = 5.0

DEFAULT_DEVNET_HOST = "127.0.0.1"
DEFAULT_DEVNET_PORT = 5050
DEFAULT_DEVNET_URL = f"http://{DEFAULT_DEVNET_HOST}:{DEFAULT_DEVNET_PORT}"
DEFAULT_DEVNET_COMMAND = "starknet-devnet"

# Free port search: DEFAULT_DEVNET_PORT + FREE_PORT_STEP, then in steps up to MAX_PORT
FREE_PORT_STEP = 1000
MAX_PORT = 65535

ALIVE_CHECK_INTERVAL = 0.1  # seconds between two liveness polls

RPC_PATH = "/"
IS_ALIVE_PATH = "/is_alive"
JSON_RPC_VERSION = "2.0"
JSON_RPC_REQUEST_ID = "1"

DEFAULT_BALANCE_UNIT = "FRI"

LATEST_COMPATIBLE_DEVNET_VERSION = "v0.1.2"

DEVNET_RELEASES_URL = (
    "https://api.github.com/repos/0xSpaceShard/starknet-devnet/releases"
)
DEVNET_DOWNLOAD_URL = (
    "https://github.com/0xSpaceShard/starknet-devnet/releases/download"
)
DEVNET_VERSIONS_DIR_NAME = "devnet-versions"
DEVNET_EXECUTABLE_NAME = "starknet-devnet"
DEVNET_ARCHIVE_NAME = "archive.tar.gz"
