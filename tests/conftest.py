import builtins as _builtins
import sys
from collections.abc import Callable
from pathlib import Path
from pathlib import Path as _Path

import pytest


@pytest.fixture
def fail_open_for(monkeypatch) -> Callable[[str | Path, BaseException], None]:
    """Monkeypatch ``Path.open`` so it raises ``exc`` only for ``target_path``
    and otherwise calls through to the real ``Path.open``.

    The source file is read with ``Path.open("rb")``, so this is the seam for
    simulating read-side failures. Tests using this fixture should be marked
    ``serial`` because they replace a class attribute for the duration of the
    test; ``monkeypatch`` restores it at teardown.

    Usage:
        fail_open_for(path, PermissionError("nope"))
    """

    def _patch(target_path: str | Path, exc: BaseException) -> None:
        real_open = Path.open
        target = Path(target_path).resolve()

        def _fake_open(self, *args, **kwargs):
            if Path(self).resolve() == target:
                raise exc
            return real_open(self, *args, **kwargs)

        monkeypatch.setattr(Path, "open", _fake_open)

    return _patch


@pytest.fixture
def permit_only_target_open(monkeypatch) -> Callable[..., None]:
    """Monkeypatch ``builtins.open`` for ``target_path`` only.

    ``SafeTextFileWriter`` opens the destination with the builtin ``open``,
    so this is the seam for simulating write-side failures. Pass ``exc`` to
    make the open itself raise, or ``replacement`` to hand back a stand-in
    file object instead. Any other path calls through to the real ``open``.
    Tests using this fixture should be marked ``serial``.

    Usage:
        permit_only_target_open(dst, PermissionError("nope"))
        permit_only_target_open(dst, replacement=FakeFile(raise_on_write=...))
    """

    def _patch(
        target_path: str | Path, exc: BaseException | None = None, *, replacement: object | None = None
    ) -> None:
        real_open = _builtins.open
        target_str = str(Path(target_path).resolve())

        def _fake_open(name, *args, **kwargs):
            try:
                name_str = str(Path(name).resolve())
            except (TypeError, OSError):
                name_str = str(name)
            if name_str == target_str:
                if exc is not None:
                    raise exc
                return replacement
            return real_open(name, *args, **kwargs)

        monkeypatch.setattr(_builtins, "open", _fake_open)

    return _patch


@pytest.fixture
def collect_stream():
    """Attach list sinks to a stream's data and error channels."""

    def _attach(stream):
        units: list[str] = []
        errors: list = []
        stream.on_data(units.append)
        stream.on_error(errors.append)
        return units, errors

    return _attach


# Make the local package importable when pytest runs from the repository root
# without an editable install.
_ROOT = _Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))
