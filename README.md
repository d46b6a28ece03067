# rustlings

A runner for small Rust exercises. Each exercise is a Rust source file listed in an
`info.toml` file. The runner builds it with `rustc`, or with `cargo clippy` or
`cargo test` when the exercise asks for that. It shows what went wrong. An exercise
counts as done once you remove the `// I AM NOT DONE` marker from its file.

## Requirements

- Python 3.11 or later
- A Rust toolchain on your `PATH`. You need `rustc` for every exercise, and `cargo`
  as well for Clippy and build-script exercises.

## Installation

```
pip install .
```

## The exercise list

`info.toml` holds an `exercises` array. Each entry has these fields:

- `name`
- `path`: the `.rs` file
- `mode`: one of `compile`, `test`, `clippy` or `buildscript`
- `hint`

```toml
[[exercises]]
name = "intro1"
path = "exercises/intro/intro1.rs"
mode = "compile"
hint = "Remove the I AM NOT DONE comment."
```

The modes work as follows:

- `compile`: built with `rustc --edition 2021`, then run.
- `test`: built with `rustc --test`, then run with `--show-output`.
- `clippy`: the runner writes `./exercises/clippy/Cargo.toml`, runs `cargo clean`, and then runs `cargo clippy -- -D warnings -D clippy::float_cmp`.
- `buildscript`: the runner writes `./exercises/tests/Cargo.toml` and runs `cargo test`.

## Usage

Run every command from the directory that holds `info.toml`. If that file is
missing, or `rustc --version` cannot be run, the command exits with status 1.

```
rustlings                  # show the welcome text
rustlings --version        # print the version
rustlings watch            # verify exercises and re-check when files change
rustlings verify           # verify all exercises in order, stopping at the first failure
rustlings run <name>       # compile and run (or test) one exercise
rustlings run next         # run the first exercise not yet done
rustlings hint <name>      # print the hint for an exercise
rustlings reset <name>     # reset an exercise with "git stash -- <file>"
rustlings list             # list exercises with their status
rustlings lsp              # write rust-project.json for rust-analyzer
rustlings cicvverify       # run every exercise and write a JSON report
```

`--nocapture` shows the output of test exercises:

```
rustlings --nocapture run <name>
```

`run`, `verify`, `hint` and `reset` exit with status 1 in either of these cases:

- no exercise has the given name;
- the exercise fails to compile, run or pass its tests.

`verify` also stops with status 1 at an exercise that passes but still carries the
marker. At that point it shows the lines around the marker.

### Listing exercises

```
rustlings list --paths          # only paths
rustlings list --names          # only names
rustlings list --filter a,b     # names or paths containing any of the patterns
rustlings list --unsolved       # only pending exercises
rustlings list --solved         # only finished exercises
```

The list ends with a line showing how many exercises are completed, and what
percentage of the total that is.

### Watch mode

`rustlings watch` first verifies all exercises. After that it watches `./exercises`
for changes to `.rs` files. When a file changes, it re-verifies the changed exercise
and then the remaining pending ones.

While watch mode runs, you can type:

- `hint`: print the current exercise's hint
- `clear`: clear the screen
- `quit`: leave watch mode
- `!<cmd>`: run a command, such as `!rustc --explain E0381`
- `help`: show this list

Use `--success-hints` to show the hint after an exercise succeeds.

### rust-analyzer

`rustlings lsp` writes `./rust-project.json`. It adds one crate, with `cfg = ["test"]`,
for every `.rs` file below `./exercises`. The sysroot source is taken from
`RUST_SRC_PATH` when that is set. Otherwise it comes from `rustc --print sysroot`.

### Report

`rustlings cicvverify` runs every exercise concurrently and writes the report to
`.github/result/check_result.json`. The directory must already exist. The report is
indented JSON with three parts:

- `exercises`: the entries, each with a `name` and a `result` (true or false);
- `user_name`: always null;
- `statistics`: `total_exercations`, `total_succeeds`, `total_failures` and `total_time`, in seconds.

## Using it from Python

The command-line functions are in `rustlings.cli`:

- `main(argv)`
- `find_exercise`
- `list_exercises`
- `cicv_verify`
- `watch`

The building blocks are in these modules:

- `rustlings.exercise`:
  - `load_exercises`
  - `Exercise`, with `compile()`, `state()` and `looks_done()`
  - `CompiledExercise`, which can be used as a context manager and removes the built binary when closed
- `rustlings.verify`: `verify`, `test` and `VerificationFailed`
- `rustlings.run`: `run` and `reset`
- `rustlings.project`: `RustAnalyzerProject`

## Environment

- `NO_EMOJI`: when set, output uses plain characters in place of emoji.
- `NO_COLOR`: when set, output has no colours. Otherwise colours are used on a terminal, or whenever `CLICOLOR_FORCE` is set to something other than `0`.
- `RUST_SRC_PATH`: when set, `rustlings lsp` uses it as the sysroot source instead of asking `rustc`.