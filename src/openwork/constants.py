"""Global constants for openwork."""

# Engine endpoint

ENGINE_HOSTNAME = "127.0.0.1"

# Origins the UI layer talks to the engine from (vite dev server + tauri webviews)
ENGINE_CORS_ORIGINS = (
    "http://localhost:5173",
    "tauri://localhost",
    "http://tauri.localhost",
)

# Executable names
ENGINE_EXECUTABLE_POSIX = "opencode"
ENGINE_EXECUTABLE_WINDOWS = "opencode.exe"
ENGINE_WRAPPER_WINDOWS = "opencode.cmd"

# Install sources
ENGINE_INSTALL_SCRIPT_URL = "https://opencode.ai/install"
ENGINE_NPM_PACKAGE = "opencode-ai"
ENGINE_BREW_FORMULA = "anomalyco/tap/opencode"

# Host server defaults
DEFAULT_HOST = "127.0.0.1"
DEFAULT_HOST_PORT = 4242
LOG_BUFFER_SIZE = 5000

# Timeouts (seconds)
CHECK_TIMEOUT_SECONDS = 15.0
STOP_TIMEOUT_SECONDS = 5.0

# Config files
OPENCODE_CONFIG_FILENAME = "opencode.json"
OPENCODE_CONFIG_DIRNAME = "opencode"
SKILLS_RELATIVE_DIR = (".opencode", "skill")
