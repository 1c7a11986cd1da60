from .decimal_text import DROPS_PRECISION, format_drops, parse_drops
from .dotpath import delete_path, get_path, has_path, set_path, split_path

__all__ = [
    "DROPS_PRECISION",
    "format_drops",
    "parse_drops",
    "split_path",
    "has_path",
    "get_path",
    "set_path",
    "delete_path",
]
