"""Verification of exercises: compile, run or test them and prompt on pending ones."""

from __future__ import annotations

import enum
import sys
from collections.abc import Iterable

from rustlings.exercise import CompiledExercise, Exercise, ExerciseFailed, Mode
from rustlings.ui import blue, bold, emoji, no_emoji, success, warn

_BAR_WIDTH = 60


class RunMode(enum.Enum):
    """Whether a passing exercise should show the completion prompt."""

    INTERACTIVE = "interactive"
    NON_INTERACTIVE = "non-interactive"


class VerificationFailed(Exception):
    """An exercise failed to compile, run or pass, or is still pending."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(str(exercise))
        self.exercise = exercise


def _is_tty(stream) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


class _Spinner:
    """A one-line status message on stderr, drawn only on a terminal."""

    def __init__(self, message: str) -> None:
        self._stream = sys.stderr
        self._enabled = _is_tty(self._stream)
        self.set_message(message)

    def set_message(self, message: str) -> None:
        if self._enabled:
            self._stream.write(f"\r\x1b[2K{message}")
            self._stream.flush()

    def finish_and_clear(self) -> None:
        if self._enabled:
            self._stream.write("\r\x1b[2K")
            self._stream.flush()


class _ProgressBar:
    """A 'Progress: [#>-] pos/len msg' bar on stderr, drawn only on a terminal."""

    def __init__(self, total: int) -> None:
        self._stream = sys.stderr
        self._enabled = _is_tty(self._stream)
        self.total = total
        self.position = 0
        self.message = ""

    def _draw(self) -> None:
        if not self._enabled:
            return
        if self.total:
            filled = min(_BAR_WIDTH, _BAR_WIDTH * self.position // self.total)
        else:
            filled = _BAR_WIDTH
        if filled < _BAR_WIDTH:
            bar = "#" * filled + ">" + "-" * (_BAR_WIDTH - filled - 1)
        else:
            bar = "#" * _BAR_WIDTH
        self._stream.write(
            f"\r\x1b[2KProgress: [{bar}] {self.position}/{self.total} {self.message}"
        )
        self._stream.flush()

    def set_position(self, position: int) -> None:
        self.position = position
        self._draw()

    def inc(self, delta: int = 1) -> None:
        self.position += delta
        self._draw()

    def set_message(self, message: str) -> None:
        self.message = message
        self._draw()


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int],
    verbose: bool,
    success_hints: bool,
) -> None:
    """Check each exercise in order; raise VerificationFailed at the first that fails."""
    num_done, total = progress
    bar = _ProgressBar(total)
    percentage = num_done / total * 100.0 if total else 100.0
    bar.set_position(num_done)
    bar.set_message(f"({percentage:.1f} %)")

    for exercise in exercises:
        match exercise.mode:
            case Mode.TEST | Mode.BUILD_SCRIPT:
                passed = _compile_and_test(
                    exercise, RunMode.INTERACTIVE, verbose, success_hints
                )
            case Mode.COMPILE:
                passed = _compile_and_run_interactively(exercise, success_hints)
            case Mode.CLIPPY:
                passed = _compile_only(exercise, success_hints)
        if not passed:
            raise VerificationFailed(exercise)
        if total:
            percentage += 100.0 / total
        bar.inc(1)
        bar.set_message(f"({percentage:.1f} %)")


def test(exercise: Exercise, verbose: bool) -> None:
    """Compile and run the exercise's tests without prompting; raise on failure."""
    _compile_and_test(exercise, RunMode.NON_INTERACTIVE, verbose, False)


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    spinner = _Spinner(f"Compiling {exercise}...")
    with _compile(exercise, spinner):
        spinner.finish_and_clear()
    return _prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    spinner = _Spinner(f"Compiling {exercise}...")
    with _compile(exercise, spinner) as compiled:
        spinner.set_message(f"Running {exercise}...")
        try:
            output = compiled.run()
        except ExerciseFailed as err:
            spinner.finish_and_clear()
            warn(f"Ran {exercise} with errors")
            print(err.output.stdout)
            print(err.output.stderr)
            raise VerificationFailed(exercise) from err
        spinner.finish_and_clear()
    return _prompt_for_completion(exercise, output.stdout, success_hints)


def _compile_and_test(
    exercise: Exercise, run_mode: RunMode, verbose: bool, success_hints: bool
) -> bool:
    spinner = _Spinner(f"Testing {exercise}...")
    with _compile(exercise, spinner) as compiled:
        try:
            output = compiled.run()
        except ExerciseFailed as err:
            spinner.finish_and_clear()
            warn(f"Testing of {exercise} failed! Please try again. Here's the output:")
            print(err.output.stdout)
            raise VerificationFailed(exercise) from err
        spinner.finish_and_clear()
    if verbose:
        print(output.stdout)
    if run_mode is RunMode.INTERACTIVE:
        return _prompt_for_completion(exercise, None, success_hints)
    return True


def _compile(exercise: Exercise, spinner: _Spinner) -> CompiledExercise:
    try:
        return exercise.compile()
    except ExerciseFailed as err:
        spinner.finish_and_clear()
        warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        print(err.output.stderr)
        raise VerificationFailed(exercise) from err


def _prompt_for_completion(
    exercise: Exercise, prompt_output: str | None, success_hints: bool
) -> bool:
    state = exercise.state()
    if state.done:
        return True

    match exercise.mode:
        case Mode.COMPILE:
            success(f"Successfully ran {exercise}!")
        case Mode.TEST:
            success(f"Successfully tested {exercise}!")
        case Mode.CLIPPY | Mode.BUILD_SCRIPT:
            success(f"Successfully compiled {exercise}!")

    match exercise.mode:
        case Mode.COMPILE:
            success_msg = "The code is compiling!"
        case Mode.TEST:
            success_msg = "The code is compiling, and the tests pass!"
        case Mode.CLIPPY:
            success_msg = emoji(
                "The code is compiling, and 📎 Clippy 📎 is happy!",
                "The code is compiling, and Clippy is happy!",
            )
        case Mode.BUILD_SCRIPT:
            success_msg = "Build script works!"

    print()
    if no_emoji():
        print(f"~*~ {success_msg} ~*~")
    else:
        print(f"🎉 🎉  {success_msg} 🎉 🎉")
    print()

    if prompt_output is not None:
        print("Output:")
        print(separator())
        print(prompt_output)
        print(separator())
        print()
    if success_hints:
        print("Hints:")
        print(separator())
        print(exercise.hint)
        print(separator())
        print()

    print("You can keep working on this exercise,")
    print(
        f"or jump into the next one by removing the {bold('`I AM NOT DONE`')} comment:"
    )
    print()
    for context_line in state.context:
        line = bold(context_line.line) if context_line.important else context_line.line
        print(f"{blue(bold(f'{context_line.number:>2}'))} {blue('|')}  {line}")

    return False


def separator() -> str:
    """The bold rule drawn around output and hints."""
    return bold("====================")