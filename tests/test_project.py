import json
import os
import subprocess
from pathlib import Path
from unittest import mock

import pytest

from rustlings.project import Crate, RustAnalyzerProject


def test_new_project_is_empty():
    project = RustAnalyzerProject()
    assert project.to_dict() == {"sysroot_src": "", "crates": []}


def test_crate_defaults():
    crate = Crate(root_module="exercises/intro1.rs")
    assert crate.edition == "2021"
    assert crate.cfg == ["test"]
    assert crate.deps == []


def test_exercises_to_json_collects_rust_files(tmp_path):
    root = tmp_path / "exercises"
    (root / "sub").mkdir(parents=True)
    (root / "a.rs").write_text("")
    (root / "sub" / "b.rs").write_text("")
    (root / "README.md").write_text("")
    project = RustAnalyzerProject()
    project.exercises_to_json(str(root))
    modules = {crate.root_module for crate in project.crates}
    assert modules == {
        os.path.join(str(root), "a.rs"),
        os.path.join(str(root), "sub", "b.rs"),
    }
    assert all(crate.cfg == ["test"] for crate in project.crates)


def test_exercises_to_json_empty_folder(tmp_path):
    project = RustAnalyzerProject()
    project.exercises_to_json(tmp_path)
    assert project.crates == []


def test_write_to_disk_round_trip(tmp_path):
    project = RustAnalyzerProject(sysroot_src="sysroot")
    project.crates.append(Crate(root_module="exercises/intro1.rs"))
    target = tmp_path / "rust-project.json"
    project.write_to_disk(target)
    text = target.read_text()
    assert json.loads(text) == project.to_dict()
    assert " " not in text


def test_sysroot_from_environment(monkeypatch):
    monkeypatch.setenv("RUST_SRC_PATH", "/opt/rust-src")
    project = RustAnalyzerProject()
    with mock.patch("subprocess.run") as run:
        project.get_sysroot_src()
    assert project.sysroot_src == "/opt/rust-src"
    assert run.call_count == 0


def test_sysroot_from_rustc(monkeypatch, capsys):
    monkeypatch.delenv("RUST_SRC_PATH", raising=False)
    completed = subprocess.CompletedProcess([], 0, stdout=b"/opt/toolchain\n", stderr=b"")
    project = RustAnalyzerProject()
    with mock.patch("subprocess.run", return_value=completed) as run:
        project.get_sysroot_src()
    assert run.call_args.args[0] == ["rustc", "--print", "sysroot"]
    assert Path(project.sysroot_src) == (
        Path("/opt/toolchain") / "lib" / "rustlib" / "src" / "rust" / "library"
    )
    assert "Determined toolchain: /opt/toolchain" in capsys.readouterr().out


def test_sysroot_without_rustc(monkeypatch):
    monkeypatch.delenv("RUST_SRC_PATH", raising=False)
    project = RustAnalyzerProject()
    with mock.patch("subprocess.run", side_effect=FileNotFoundError("rustc")):
        with pytest.raises(FileNotFoundError):
            project.get_sysroot_src()