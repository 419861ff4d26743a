from collabkit.utils.env import load_dotenv_files
from collabkit.utils.logging import parse_log_level, setup_logging
from collabkit.utils.merge import deep_merge, get_path, set_path

__all__ = [
    "load_dotenv_files",
    "parse_log_level",
    "setup_logging",
    "deep_merge",
    "get_path",
    "set_path",
]
