"""Native desktop file picker used for image import."""

from __future__ import annotations

import asyncio
import shutil

from .imaging import IMAGE_EXTENSIONS

IMAGE_FILTER: list[tuple[str, list[str]]] = [
    ("Images", [f"*{ext}" for ext in sorted(IMAGE_EXTENSIONS)])
]


async def _run_picker(cmd: list[str], timeout: float) -> str | None:
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError:
        return None
    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except (TimeoutError, asyncio.TimeoutError):
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()
        return None
    if proc.returncode != 0:
        return None
    path = stdout.decode().strip()
    return path or None


async def open_native_file_dialog(
    title: str = "画像を選択",
    file_filter: list[tuple[str, list[str]]] | None = None,
    timeout: float = 120,
) -> str | None:
    """Open a native Linux file picker, trying zenity then kdialog.

    Returns the selected path, or ``None`` when cancelled or no picker exists.
    """
    zenity_bin = shutil.which("zenity")
    if zenity_bin is not None:
        cmd: list[str] = [zenity_bin, "--file-selection", f"--title={title}"]
        for name, patterns in file_filter or []:
            cmd.append(f"--file-filter={name} | {' '.join(patterns)}")
        return await _run_picker(cmd, timeout)

    kdialog_bin = shutil.which("kdialog")
    if kdialog_bin is not None:
        cmd = [kdialog_bin, "--title", title, "--getopenfilename", "."]
        if file_filter:
            cmd.append(
                "\n".join(f"{' '.join(patterns)}|{name}" for name, patterns in file_filter)
            )
        return await _run_picker(cmd, timeout)

    return None


def has_native_file_dialog() -> bool:
    return shutil.which("zenity") is not None or shutil.which("kdialog") is not None
