#!filepath: mcspice/utils/filesystem.py
import shutil
from pathlib import Path
from typing import List

from mcspice import logs


class FileSystem:
    """
    统一文件系统工具
    - 自动创建目录
    - 安全写入文本（临时文件 → replace）
    - 幂等符号链接
    - 尽力删除（失败只记日志）
    - 按 glob 统计文件
    """

    @staticmethod
    def ensure_dir(path: str | Path) -> Path:
        """
        创建目录（如果不存在）
        """
        p = Path(path)
        if not p.exists():
            p.mkdir(parents=True, exist_ok=True)
            logs.debug(f"[FS] 创建目录: {p}")
        return p

    @staticmethod
    def safe_write_text(path: str | Path, text: str, encoding: str = "utf-8") -> None:
        """
        原子写入文本，覆盖已有文件。
            1) 写入 <name>.tmp
            2) replace → 正式文件
        """
        path = Path(path)
        FileSystem.ensure_dir(path.parent)

        tmp_path = path.with_name(path.name + ".tmp")

        # newline="" 保证 \n 原样落盘，不做平台换行转换
        with open(tmp_path, "w", encoding=encoding, newline="") as f:
            f.write(text)

        tmp_path.replace(path)
        logs.debug(f"[FS] 原子写入完成: {path}")

    @staticmethod
    def ensure_symlink(source: str | Path, link: str | Path) -> bool:
        """
        link -> source

        已存在的文件 / 目录 / 链接一律跳过，从不覆盖。
        返回是否新建了链接。
        """
        link = Path(link)
        if link.exists() or link.is_symlink():
            logs.debug(f"[FS] 链接已存在，跳过: {link}")
            return False

        link.symlink_to(Path(source))
        logs.debug(f"[FS] 创建链接: {link} -> {source}")
        return True

    @staticmethod
    def remove_quietly(path: str | Path) -> bool:
        """
        尽力删除文件/目录，失败只记 warning。
        """
        p = Path(path)
        try:
            if p.is_dir() and not p.is_symlink():
                shutil.rmtree(p)
            else:
                p.unlink(missing_ok=True)
        except OSError as e:
            logs.warning(f"[FS] 删除失败（忽略）: {p} ({e})")
            return False

        logs.debug(f"[FS] 删除: {p}")
        return True

    @staticmethod
    def glob_files(path: str | Path, pattern: str) -> List[Path]:
        """
        返回目录下匹配 pattern 的文件（不递归）
        """
        p = Path(path)
        if not p.exists():
            return []

        return sorted(f for f in p.glob(pattern) if f.is_file())

    @staticmethod
    def read_text(path: str | Path, encoding: str = "utf-8") -> str:
        return Path(path).read_text(encoding=encoding)
