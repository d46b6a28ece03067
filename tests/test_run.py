import subprocess
from pathlib import Path
from unittest import mock

import pytest

from rustlings.exercise import Exercise, Mode
from rustlings.run import reset, run
from rustlings.verify import VerificationFailed

PENDING_SOURCE = "// I AM NOT DONE\n\n#[test]\nfn it_works() {}\n"
FINISHED_SOURCE = "fn main() {\n}\n"


class FakeToolchain:
    def __init__(self, compile_ok=True, run_ok=True, compile_stderr="",
                 run_stdout="", run_stderr=""):
        self.compile_ok = compile_ok
        self.run_ok = run_ok
        self.compile_stderr = compile_stderr
        self.run_stdout = run_stdout
        self.run_stderr = run_stderr
        self.calls = []

    def __call__(self, args, **kwargs):
        args = list(args)
        self.calls.append(args)
        if args[0] in ("rustc", "cargo"):
            if self.compile_ok and "-o" in args:
                Path(args[args.index("-o") + 1]).write_bytes(b"")
            return subprocess.CompletedProcess(
                args, 0 if self.compile_ok else 1,
                stdout=b"", stderr=self.compile_stderr.encode(),
            )
        return subprocess.CompletedProcess(
            args, 0 if self.run_ok else 101,
            stdout=self.run_stdout.encode(), stderr=self.run_stderr.encode(),
        )

    def runs(self):
        return [call for call in self.calls if call[0].startswith("./temp_")]


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CLICOLOR_FORCE", raising=False)
    monkeypatch.delenv("NO_EMOJI", raising=False)
    return tmp_path


def make_exercise(tmp_path, name, source, mode):
    path = tmp_path / f"{name}.rs"
    path.write_text(source)
    return Exercise(name=name, path=path, mode=mode, hint="Hello!")


def test_run_compile_success_prints_output(workdir, capsys):
    exercise = make_exercise(workdir, "compSuccess", FINISHED_SOURCE, Mode.COMPILE)
    fake = FakeToolchain(run_stdout="hello from main")
    with mock.patch("subprocess.run", side_effect=fake):
        run(exercise, False)
    out = capsys.readouterr().out
    assert "hello from main" in out
    assert f"Successfully ran {exercise}" in out
    assert len(fake.runs()) == 1


def test_run_compile_failure_raises(workdir, capsys):
    exercise = make_exercise(workdir, "compFailure", "fn main() {\n    let\n}\n", Mode.COMPILE)
    fake = FakeToolchain(compile_ok=False, compile_stderr="expected pattern")
    with mock.patch("subprocess.run", side_effect=fake):
        with pytest.raises(VerificationFailed) as info:
            run(exercise, False)
    assert info.value.exercise is exercise
    out = capsys.readouterr().out
    assert f"Compilation of {exercise} failed!, Compiler error message:" in out
    assert "expected pattern" in out
    assert fake.runs() == []


def test_run_runtime_failure_raises(workdir, capsys):
    exercise = make_exercise(workdir, "crash", FINISHED_SOURCE, Mode.COMPILE)
    fake = FakeToolchain(run_ok=False, run_stdout="partial", run_stderr="panicked")
    with mock.patch("subprocess.run", side_effect=fake):
        with pytest.raises(VerificationFailed):
            run(exercise, False)
    out = capsys.readouterr().out
    assert "partial" in out
    assert "panicked" in out
    assert f"Ran {exercise} with errors" in out


def test_run_pending_compile_exercise_does_not_prompt(workdir, capsys):
    exercise = make_exercise(workdir, "pending_exercise",
                             "// I AM NOT DONE\nfn main() {}\n", Mode.COMPILE)
    fake = FakeToolchain()
    with mock.patch("subprocess.run", side_effect=fake):
        run(exercise, False)
    assert "I AM NOT DONE" not in capsys.readouterr().out


def test_run_pending_test_exercise_does_not_prompt(workdir, capsys):
    exercise = make_exercise(workdir, "pending_test_exercise", PENDING_SOURCE, Mode.TEST)
    fake = FakeToolchain()
    with mock.patch("subprocess.run", side_effect=fake):
        run(exercise, False)
    assert "I AM NOT DONE" not in capsys.readouterr().out
    assert fake.runs()[0][1] == "--show-output"


def test_run_test_with_output(workdir, capsys):
    exercise = make_exercise(workdir, "testSuccess", FINISHED_SOURCE, Mode.TEST)
    fake = FakeToolchain(run_stdout="THIS TEST TOO SHALL PASS")
    with mock.patch("subprocess.run", side_effect=fake):
        run(exercise, True)
    assert "THIS TEST TOO SHALL PASS" in capsys.readouterr().out


def test_run_test_without_output(workdir, capsys):
    exercise = make_exercise(workdir, "testSuccess", FINISHED_SOURCE, Mode.TEST)
    fake = FakeToolchain(run_stdout="THIS TEST TOO SHALL PASS")
    with mock.patch("subprocess.run", side_effect=fake):
        run(exercise, False)
    assert "THIS TEST TOO SHALL PASS" not in capsys.readouterr().out


def test_run_test_failure_raises(workdir):
    exercise = make_exercise(workdir, "testNotPassed", FINISHED_SOURCE, Mode.TEST)
    fake = FakeToolchain(run_ok=False)
    with mock.patch("subprocess.run", side_effect=fake):
        with pytest.raises(VerificationFailed) as info:
            run(exercise, False)
    assert info.value.exercise is exercise


def test_run_build_script_skips_binary(workdir):
    (workdir / "exercises" / "tests").mkdir(parents=True)
    exercise = make_exercise(workdir, "build", FINISHED_SOURCE, Mode.BUILD_SCRIPT)
    fake = FakeToolchain()
    with mock.patch("subprocess.run", side_effect=fake):
        result = run(exercise, False)
    assert result is None
    manifest = (workdir / "exercises" / "tests" / "Cargo.toml").read_text()
    assert 'name = "build"' in manifest
    assert fake.runs() == []
    assert fake.calls[0][:2] == ["cargo", "test"]


def test_reset_stashes_exercise_file(workdir):
    exercise = make_exercise(workdir, "intro1", FINISHED_SOURCE, Mode.COMPILE)
    with mock.patch("subprocess.Popen") as popen:
        reset(exercise)
    popen.assert_called_once_with(["git", "stash", "--", str(exercise.path)])


def test_reset_without_git_raises(workdir):
    exercise = make_exercise(workdir, "intro1", FINISHED_SOURCE, Mode.COMPILE)
    with mock.patch("subprocess.Popen", side_effect=FileNotFoundError("git")):
        with pytest.raises(RuntimeError, match="Failed to reset"):
            reset(exercise)