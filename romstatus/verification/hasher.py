import hashlib
import zlib
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from romstatus.core.candidates import File
from romstatus.logging_cfg import get_logger

logger = get_logger(__name__)

DEFAULT_ALGORITHMS = ("crc32", "md5", "sha1")


def calculate_hashes(
    file_path: Path,
    algorithms: Tuple[str, ...] = DEFAULT_ALGORITHMS,
    block_size: int = 65536,
    progress_cb: Optional[Callable[[float], None]] = None,
) -> Dict[str, str]:
    """
    Calculate hashes for a file.
    Supported algorithms: 'crc32', 'md5', 'sha1', 'sha256'.
    Returns a dictionary with algorithm names as keys and hex strings as values.
    OSError while reading propagates to the caller.
    """
    hash_objs = _init_hash_objects(algorithms)

    total_size = file_path.stat().st_size
    processed = 0

    with open(file_path, "rb") as f:
        while True:
            chunk = f.read(block_size)
            if not chunk:
                break
            _update_hashes(hash_objs, chunk)

            if progress_cb and total_size > 0:
                processed += len(chunk)
                progress_cb(processed / total_size)

    return _finalize_hashes(hash_objs)


def _init_hash_objects(algorithms: Tuple[str, ...]) -> Dict:
    objs = {}
    for alg in algorithms:
        if alg == "crc32":
            objs["crc32"] = 0
        elif alg == "md5":
            objs["md5"] = hashlib.md5()
        elif alg == "sha1":
            objs["sha1"] = hashlib.sha1()
        elif alg == "sha256":
            objs["sha256"] = hashlib.sha256()
    return objs


def _update_hashes(objs: Dict, chunk: bytes):
    for alg, obj in objs.items():
        if alg == "crc32":
            objs["crc32"] = zlib.crc32(chunk, objs["crc32"])
        else:
            obj.update(chunk)


def _finalize_hashes(objs: Dict) -> Dict[str, str]:
    res = {}
    for alg, obj in objs.items():
        if alg == "crc32":
            res["crc32"] = f"{obj & 0xFFFFFFFF:08x}"
        else:
            res[alg] = obj.hexdigest()
    return res


def _expand(paths: Iterable[Path]) -> List[Path]:
    files = []
    for path in paths:
        if path.is_dir():
            files.extend(sorted(p for p in path.rglob("*") if p.is_file()))
        elif path.is_file():
            files.append(path)
        else:
            logger.warning("Input path not found: %s", path)
    return files


def scan_files(
    paths: Iterable[Path],
    progress_cb: Optional[Callable[[float, str], None]] = None,
) -> List[File]:
    """Hash every file under the given paths (directories are walked recursively)."""
    targets = _expand(paths)
    scanned = []
    for i, path in enumerate(targets):
        if progress_cb:
            progress_cb(i / len(targets), f"Hashing {path.name}")
        hashes = calculate_hashes(path)
        scanned.append(
            File(
                file_path=str(path),
                size=path.stat().st_size,
                crc32=hashes.get("crc32"),
                md5=hashes.get("md5"),
                sha1=hashes.get("sha1"),
            )
        )
    if progress_cb:
        progress_cb(1.0, "Hashing complete")
    logger.debug("Hashed %d input files", len(scanned))
    return scanned
