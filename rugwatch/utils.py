import logging
import os

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB

DEFAULT_EXTENSIONS = {".sol", ".vy"}

DEFAULT_EXCLUDE_DIRS: set[str] = {
    'node_modules', '.git', '.svn', '.hg', 'lib', 'cache',
    'artifacts', 'out', '__pycache__', '.venv', 'venv',
}


def discover_files(
    root: str,
    extensions: set[str] | None = None,
    exclude_dirs: set[str] | None = None,
) -> list[str]:
    """Walk directory tree collecting contract sources by extension. Symlink-loop safe."""
    if extensions is None:
        extensions = DEFAULT_EXTENSIONS
    if exclude_dirs is None:
        exclude_dirs = DEFAULT_EXCLUDE_DIRS
    if os.path.isfile(root):
        return [root]

    found: list[str] = []
    seen_inodes: set[tuple[int, int]] = set()

    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        try:
            dir_stat = os.stat(dirpath)
            inode_key = (dir_stat.st_dev, dir_stat.st_ino)
            if inode_key in seen_inodes:
                dirnames.clear()
                continue
            seen_inodes.add(inode_key)
        except OSError:
            dirnames.clear()
            continue

        dirnames[:] = sorted(d for d in dirnames if d not in exclude_dirs)

        for fname in sorted(filenames):
            _, ext = os.path.splitext(fname)
            if ext.lower() in extensions:
                found.append(os.path.join(dirpath, fname))
    return found


def read_source_safe(path: str) -> str | None:
    """Read a source file up to MAX_FILE_SIZE. Returns None on error."""
    try:
        size = os.path.getsize(path)
        if size > MAX_FILE_SIZE:
            logger.warning("Skipping %s: exceeds 5MB limit (%d bytes)", path, size)
            return None
        with open(path, "rb") as f:
            return f.read(MAX_FILE_SIZE).decode("utf-8", errors="replace")
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        return None
