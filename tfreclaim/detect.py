import os


def detect_format(filepath: str) -> str:
    """
    Return 'json', 'yaml', or 'unknown' for an inventory file.
    """
    _, ext = os.path.splitext(filepath.lower())

    if ext == ".json":
        return "json"
    if ext in (".yaml", ".yml"):
        return "yaml"
    return "unknown"
