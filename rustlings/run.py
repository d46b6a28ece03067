"""Running a single exercise and resetting it."""

from __future__ import annotations

import subprocess

from rustlings.exercise import Exercise, ExerciseFailed, Mode
from rustlings.ui import success, warn
from rustlings.verify import VerificationFailed, _Spinner, test


def run(exercise: Exercise, verbose: bool) -> None:
    """Compile and run, or test, one exercise; raise VerificationFailed on failure."""
    match exercise.mode:
        case Mode.TEST | Mode.BUILD_SCRIPT:
            test(exercise, verbose)
        case Mode.COMPILE | Mode.CLIPPY:
            _compile_and_run(exercise)


def reset(exercise: Exercise) -> None:
    """Stash the changes made to the exercise file with git."""
    try:
        subprocess.Popen(["git", "stash", "--", str(exercise.path)])
    except OSError as err:
        raise RuntimeError(f"Failed to reset {exercise}: {err}") from err


def _compile_and_run(exercise: Exercise) -> None:
    spinner = _Spinner(f"Compiling {exercise}...")
    try:
        compiled = exercise.compile()
    except ExerciseFailed as err:
        spinner.finish_and_clear()
        warn(f"Compilation of {exercise} failed!, Compiler error message:\n")
        print(err.output.stderr)
        raise VerificationFailed(exercise) from err

    with compiled:
        spinner.set_message(f"Running {exercise}...")
        try:
            output = compiled.run()
        except ExerciseFailed as err:
            spinner.finish_and_clear()
            print(err.output.stdout)
            print(err.output.stderr)
            warn(f"Ran {exercise} with errors")
            raise VerificationFailed(exercise) from err
        spinner.finish_and_clear()

    print(output.stdout)
    success(f"Successfully ran {exercise}")