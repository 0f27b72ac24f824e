"""End-to-end tests for template instantiation.

Covers the walk order, variable reuse across files, directory and file
outputs, and abandoning a single file while its siblings continue.
"""

import os

import pytest

from tmpl_lib.errors import FileSystemError, PromptAborted
from tmpl_lib.generator import Outcome, generate_from_template


def test_file_output_with_inline_expression(make_template, scripted, out_dir):
    root = make_template({"hello": '#name:string\n!"out/hello.txt"\nHello, `name`'})
    prompter, _ = scripted("Ada")
    report = generate_from_template(root, prompter, base_dir=out_dir)
    assert report.ok
    assert (out_dir / "out" / "hello.txt").read_text() == "Hello, Ada"
    assert report.results[0].outcome is Outcome.CREATED_FILE
    assert report.results[0].target == "out/hello.txt"


def test_directory_output_warns_when_body_not_empty(make_template, scripted, out_dir, capsys):
    root = make_template({"dir": '!"out/sub/"\nignored body\n'})
    prompter, _ = scripted()
    report = generate_from_template(root, prompter, base_dir=out_dir)
    assert report.results[0].outcome is Outcome.CREATED_DIRECTORY
    assert (out_dir / "out" / "sub").is_dir()
    assert list((out_dir / "out" / "sub").iterdir()) == []
    captured = capsys.readouterr()
    assert "Directory 'sub' successfully created" in captured.out
    assert "File 'sub' content is unused" in captured.err


def test_directory_output_without_body_has_no_warning(make_template, scripted, out_dir, capsys):
    root = make_template({"dir": '!"out/sub/"\n'})
    prompter, _ = scripted()
    generate_from_template(root, prompter, base_dir=out_dir)
    assert "content is unused" not in capsys.readouterr().err


def test_variable_is_prompted_once_across_files(make_template, scripted, out_dir):
    root = make_template(
        {
            "a": '#flag:boolean\n!"a.txt"\nA=`flag`',
            "b": '#flag:boolean\n!"b.txt"\nB=`flag`',
        }
    )
    prompter, feed = scripted("n")
    report = generate_from_template(root, prompter, base_dir=out_dir)
    assert report.ok
    assert len(feed.prompts) == 1
    assert (out_dir / "a.txt").read_text() == "A=false"
    assert (out_dir / "b.txt").read_text() == "B=false"


def test_choice_binding_is_used_by_later_files(make_template, scripted, out_dir):
    root = make_template(
        {
            "1_declare": '#color:[red|green]\n!"color.txt"\n`color`',
            "2_use": '!if (color == red) "red.txt" else "other.txt"\nred it is',
        }
    )
    prompter, _ = scripted("7", "zero", "0")
    generate_from_template(root, prompter, base_dir=out_dir)
    assert (out_dir / "color.txt").read_text() == "red"
    assert (out_dir / "red.txt").read_text() == "red it is"


def test_null_path_skips_file_and_siblings_continue(make_template, scripted, out_dir, capsys):
    root = make_template(
        {
            "a_skipped": "#keep:boolean\n!if (keep) \"a.txt\" else null\nA",
            "b_kept": '!"b.txt"\nB',
        }
    )
    prompter, _ = scripted("N")
    report = generate_from_template(root, prompter, base_dir=out_dir)
    assert [r.outcome for r in report.results] == [Outcome.SKIPPED, Outcome.CREATED_FILE]
    assert report.ok
    assert not (out_dir / "a.txt").exists()
    assert (out_dir / "b.txt").read_text() == "B"
    assert "No output path for 'a_skipped' file" in capsys.readouterr().err


def test_file_without_eval_script_is_skipped(make_template, scripted, out_dir):
    root = make_template({"plain": "just text\n"})
    prompter, _ = scripted()
    report = generate_from_template(root, prompter, base_dir=out_dir)
    assert report.results[0].outcome is Outcome.SKIPPED
    assert list(out_dir.iterdir()) == []


def test_evaluation_error_abandons_only_that_file(make_template, scripted, out_dir, capsys):
    root = make_template(
        {
            "a_broken": '!"a.txt"\n`nobody`',
            "b_bad_syntax": '!"b.txt" +\n',
            "c_fine": '!"c.txt"\nC',
        }
    )
    prompter, _ = scripted()
    report = generate_from_template(root, prompter, base_dir=out_dir)
    outcomes = [r.outcome for r in report.results]
    assert outcomes == [Outcome.FAILED, Outcome.FAILED, Outcome.CREATED_FILE]
    assert not report.ok
    assert not (out_dir / "a.txt").exists()
    assert (out_dir / "c.txt").read_text() == "C"
    err = capsys.readouterr().err
    assert "Failed to evaluate 'a_broken' file: Unresolved reference 'nobody'" in err


def test_clashing_choice_type_fails_only_that_file(make_template, scripted, out_dir, capsys):
    root = make_template(
        {
            "a": '#color:[red|green]\n!"a.txt"\n`color`',
            "b": '#Color:[x|y|z]\n!"b.txt"\n`Color.x`',
            "c": '!"c.txt"\nC',
        }
    )
    prompter, feed = scripted("0", "2")
    report = generate_from_template(root, prompter, base_dir=out_dir)
    assert [r.outcome for r in report.results] == [Outcome.CREATED_FILE, Outcome.FAILED, Outcome.CREATED_FILE]
    assert len(feed.prompts) == 1
    assert (out_dir / "a.txt").read_text() == "red"
    assert not (out_dir / "b.txt").exists()
    assert (out_dir / "c.txt").read_text() == "C"
    assert "already declared as [red|green]" in capsys.readouterr().err


def test_capitalized_choice_variable(make_template, scripted, out_dir):
    root = make_template({"s": '#Size:[small|large]\n!if (Size == small) "s.txt" else "l.txt"\n`Size`'})
    prompter, _ = scripted("0")
    report = generate_from_template(root, prompter, base_dir=out_dir)
    assert report.ok
    assert (out_dir / "s.txt").read_text() == "small"


def test_deeply_nested_span_fails_only_that_file(make_template, scripted, out_dir):
    nested = "(" * 2000 + "1" + ")" * 2000
    root = make_template({"a": '!"a.txt"\n`' + nested + "`", "b": '!"b.txt"\nB'})
    prompter, _ = scripted()
    report = generate_from_template(root, prompter, base_dir=out_dir)
    assert [r.outcome for r in report.results] == [Outcome.FAILED, Outcome.CREATED_FILE]
    assert "nested too deeply" in report.results[0].reason
    assert (out_dir / "b.txt").read_text() == "B"


def test_rejected_declaration_leads_to_unbound_reference(make_template, scripted, out_dir):
    root = make_template({"x": '#bad-name:int\n!"x.txt"\n`bad`'})
    prompter, _ = scripted()
    report = generate_from_template(root, prompter, base_dir=out_dir)
    assert report.results[0].outcome is Outcome.FAILED


def test_walk_is_sorted_and_recursive(make_template, scripted, out_dir):
    root = make_template(
        {
            "b/inner": '#name:string\n!"b-" + name\nB',
            "a": '#name:string\n!"a-" + name\nA',
            "c": '!"c-" + name\nC',
        }
    )
    prompter, feed = scripted("x")
    report = generate_from_template(root, prompter, base_dir=out_dir)
    assert [r.source.name for r in report.results] == ["a", "inner", "c"]
    assert sorted(os.listdir(out_dir)) == ["a-x", "b-x", "c-x"]
    assert len(feed.prompts) == 1


def test_escaped_lines_render_without_escape(make_template, scripted, out_dir):
    root = make_template({"main.c": '!"main.c"\n##include <stdio.h>\n!!not a script\nuse ``ticks``\n'})
    prompter, _ = scripted()
    generate_from_template(root, prompter, base_dir=out_dir)
    assert (out_dir / "main.c").read_text() == "#include <stdio.h>\n!not a script\nuse `ticks`\n"


def test_existing_output_file_is_reported(make_template, scripted, out_dir):
    (out_dir / "taken.txt").write_text("old")
    root = make_template({"t": '!"taken.txt"\nnew'})
    prompter, _ = scripted()
    report = generate_from_template(root, prompter, base_dir=out_dir)
    assert report.results[0].outcome is Outcome.FAILED
    assert report.results[0].reason == "file already exists"
    assert (out_dir / "taken.txt").read_text() == "old"


def test_presets_answer_without_prompting(make_template, scripted, out_dir):
    root = make_template({"p": '#project:string\n!project + "/README.md"\n## `project`\n'})
    prompter, feed = scripted()
    generate_from_template(root, prompter, presets={"project": "demo"}, base_dir=out_dir)
    assert (out_dir / "demo" / "README.md").read_text() == "# demo\n"
    assert feed.prompts == []


def test_single_file_template_root(tmp_path, scripted, out_dir):
    template = tmp_path / "single"
    template.write_text('!"single.txt"\nS')
    prompter, _ = scripted()
    report = generate_from_template(template, prompter, base_dir=out_dir)
    assert report.ok
    assert (out_dir / "single.txt").read_text() == "S"


def test_missing_template_root_aborts(tmp_path, scripted):
    prompter, _ = scripted()
    with pytest.raises(FileSystemError):
        generate_from_template(tmp_path / "nope", prompter)


def test_exhausted_input_aborts_run(make_template, scripted, out_dir):
    root = make_template({"q": '#name:string\n!"q.txt"\n'})
    prompter, _ = scripted()
    with pytest.raises(PromptAborted):
        generate_from_template(root, prompter, base_dir=out_dir)


@pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0, reason="needs POSIX permissions as non-root")
def test_unreadable_subdirectory_fails_only_that_subtree(make_template, scripted, out_dir):
    root = make_template({"a_locked/x": '!"x.txt"\n', "b": '!"b.txt"\nB'})
    locked = root / "a_locked"
    locked.chmod(0)
    try:
        prompter, _ = scripted()
        report = generate_from_template(root, prompter, base_dir=out_dir)
    finally:
        locked.chmod(0o755)
    assert [r.outcome for r in report.results] == [Outcome.FAILED, Outcome.CREATED_FILE]
    assert (out_dir / "b.txt").read_text() == "B"
