from pathlib import Path

from preprocessing.archive import PathLike


class PreprocessingIo:
    """Maps relative archive names onto the input and output directories."""

    def __init__(self, dir_in: PathLike, dir_out: PathLike):
        self.dir_in = Path(dir_in).resolve()
        self.dir_out = Path(dir_out).resolve()

    def full_path_in(self, rel: PathLike = "") -> Path:
        return self.dir_in / _normalize(rel)

    def full_path_out(self, rel: PathLike = "") -> Path:
        return self.dir_out / _normalize(rel)

    @staticmethod
    def ensure_parent_exists(path: PathLike) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    def find_archives(self) -> list[str]:
        """Relative names of all ``*.zip`` files below the input directory, sorted."""
        if not self.dir_in.is_dir():
            return []
        return sorted(p.relative_to(self.dir_in).as_posix() for p in self.dir_in.rglob("*.zip"))


def _normalize(rel: PathLike) -> Path:
    # archive names may come from Windows-style listings ("sub\\a.zip")
    return Path(str(rel).replace("\\", "/"))
