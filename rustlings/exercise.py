"""Exercises: loading, compiling, running and detecting completion."""

from __future__ import annotations

import contextlib
import enum
import os
import re
import subprocess
import threading
import tomllib
import weakref
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from rustlings.ui import emoji

RUSTC_COLOR_ARGS = ("--color", "always")
RUSTC_EDITION_ARGS = ("--edition", "2021")
I_AM_DONE_REGEX = re.compile(r"^\s*///?\s*I\s+AM\s+NOT\s+DONE", re.MULTILINE)
CONTEXT = 2
CLIPPY_CARGO_TOML_PATH = "./exercises/clippy/Cargo.toml"
BUILD_SCRIPT_CARGO_TOML_PATH = "./exercises/tests/Cargo.toml"


def temp_file() -> str:
    """Return a temporary binary name unique to this process and thread."""
    return f"./temp_{os.getpid()}_{threading.get_ident()}"


def _remove(path: str) -> None:
    with contextlib.suppress(OSError):
        os.remove(path)


def clean() -> None:
    """Remove this thread's temporary binary, if any."""
    _remove(temp_file())


class Mode(enum.Enum):
    """How an exercise is checked."""

    COMPILE = "compile"
    TEST = "test"
    CLIPPY = "clippy"
    BUILD_SCRIPT = "buildscript"


@dataclass(frozen=True)
class ContextLine:
    """A source line shown around the pending marker."""

    line: str
    number: int
    important: bool


@dataclass(frozen=True)
class State:
    """Completion state: done when ``context`` is None, pending otherwise."""

    context: tuple[ContextLine, ...] | None = None

    DONE: ClassVar["State"]

    @property
    def done(self) -> bool:
        return self.context is None


State.DONE = State()


@dataclass(frozen=True)
class ExerciseOutput:
    """Captured output of a finished command."""

    stdout: str
    stderr: str


class ExerciseFailed(Exception):
    """Compiling or running an exercise did not succeed."""

    def __init__(self, output: ExerciseOutput) -> None:
        super().__init__(output.stderr or output.stdout)
        self.output = output


def _output_of(completed: subprocess.CompletedProcess) -> ExerciseOutput:
    return ExerciseOutput(
        stdout=(completed.stdout or b"").decode("utf-8", errors="replace"),
        stderr=(completed.stderr or b"").decode("utf-8", errors="replace"),
    )


def _lines(source: str) -> list[str]:
    lines = source.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _cargo_toml(name: str) -> str:
    return (
        "[package]\n"
        f'name = "{name}"\n'
        'version = "0.0.1"\n'
        'edition = "2021"\n'
        "[[bin]]\n"
        f'name = "{name}"\n'
        f'path = "{name}.rs"'
    )


def _write_cargo_toml(path: str, name: str) -> None:
    message = emoji(
        "Failed to write 📎 Clippy 📎 Cargo.toml file.",
        "Failed to write Clippy Cargo.toml file.",
    )
    try:
        Path(path).write_text(_cargo_toml(name))
    except OSError as err:
        raise OSError(f"{message}: {err}") from err


def _capture(args: Sequence[str]) -> subprocess.CompletedProcess:
    return subprocess.run(list(args), capture_output=True)


@dataclass(frozen=True)
class Exercise:
    """One exercise as described in info.toml."""

    name: str
    path: Path
    mode: Mode
    hint: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))
        object.__setattr__(self, "mode", Mode(self.mode))

    @classmethod
    def from_mapping(cls, data: Mapping) -> "Exercise":
        try:
            return cls(
                name=data["name"],
                path=Path(data["path"]),
                mode=Mode(data["mode"]),
                hint=data["hint"],
            )
        except KeyError as err:
            raise ValueError(f"missing field {err.args[0]!r} in exercise") from err

    def __str__(self) -> str:
        return str(self.path)

    def compile(self) -> "CompiledExercise":
        """Build the exercise; raise ExerciseFailed with the compiler output on failure."""
        binary = temp_file()
        path = str(self.path)
        rustc = ("rustc", path, "-o", binary, *RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS)
        try:
            match self.mode:
                case Mode.COMPILE:
                    completed = _capture(rustc)
                case Mode.TEST:
                    completed = _capture(
                        ("rustc", "--test", path, "-o", binary,
                         *RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS)
                    )
                case Mode.CLIPPY:
                    _write_cargo_toml(CLIPPY_CARGO_TOML_PATH, self.name)
                    # Build a binary as well so the exercise can be run afterwards.
                    _capture(rustc)
                    _capture(("cargo", "clean", "--manifest-path",
                              CLIPPY_CARGO_TOML_PATH, *RUSTC_COLOR_ARGS))
                    completed = _capture(
                        ("cargo", "clippy", "--manifest-path", CLIPPY_CARGO_TOML_PATH,
                         *RUSTC_COLOR_ARGS, "--", "-D", "warnings",
                         "-D", "clippy::float_cmp")
                    )
                case Mode.BUILD_SCRIPT:
                    _write_cargo_toml(BUILD_SCRIPT_CARGO_TOML_PATH, self.name)
                    completed = _capture(
                        ("cargo", "test", "--manifest-path", BUILD_SCRIPT_CARGO_TOML_PATH)
                    )
        except FileNotFoundError as err:
            raise RuntimeError(f"Failed to run 'compile' command: {err}") from err

        if completed.returncode == 0:
            return CompiledExercise(self, binary)
        _remove(binary)
        raise ExerciseFailed(_output_of(completed))

    def _run(self, binary: str) -> ExerciseOutput:
        match self.mode:
            case Mode.TEST:
                arg = "--show-output"
            case Mode.BUILD_SCRIPT:
                return ExerciseOutput(stdout="", stderr="")
            case _:
                arg = ""
        try:
            completed = _capture((binary, arg))
        except OSError as err:
            raise RuntimeError(f"Failed to run 'run' command: {err}") from err
        output = _output_of(completed)
        if completed.returncode != 0:
            raise ExerciseFailed(output)
        return output

    def state(self) -> State:
        """Inspect the source for the pending marker."""
        source = self.path.read_text(encoding="utf-8", errors="replace")
        if not I_AM_DONE_REGEX.search(source):
            return State.DONE
        lines = _lines(source)
        matched = next(
            (i for i, line in enumerate(lines) if I_AM_DONE_REGEX.search(line)), None
        )
        if matched is None:
            raise RuntimeError("pending marker spans several lines")
        low = max(matched - CONTEXT, 0)
        high = matched + CONTEXT
        context = tuple(
            ContextLine(line=line, number=i + 1, important=i == matched)
            for i, line in enumerate(lines)
            if low <= i <= high
        )
        return State(context)

    def looks_done(self) -> bool:
        """Whether the pending marker has been removed."""
        return self.state().done


class CompiledExercise:
    """A successfully built exercise; removes its binary when closed."""

    def __init__(self, exercise: Exercise, binary: str | None = None) -> None:
        self.exercise = exercise
        self.binary = binary or temp_file()
        self._finalizer = weakref.finalize(self, _remove, self.binary)

    def run(self) -> ExerciseOutput:
        """Run the built binary; raise ExerciseFailed when it fails."""
        return self.exercise._run(self.binary)

    def close(self) -> None:
        """Remove the built binary."""
        self._finalizer()

    def __enter__(self) -> "CompiledExercise":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def load_exercises(path: str | os.PathLike = "info.toml") -> list[Exercise]:
    """Read the exercise list from an info.toml file."""
    with open(path, "rb") as handle:
        data = tomllib.load(handle)
    return [Exercise.from_mapping(entry) for entry in data.get("exercises", [])]