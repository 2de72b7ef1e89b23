from pathlib import Path

import pytest

from fanout.errors import InputReadError
from fanout.jobs import build_jobs, load_lines, output_path, template_arguments


def test_load_lines_keeps_blank_lines(tmp_path):
    f = tmp_path / "in.txt"
    f.write_text("alpha\n\n  beta  \r\ngamma\n", encoding="utf-8")
    assert load_lines(f) == ["alpha", "", "beta", "gamma"]


def test_load_lines_without_trailing_newline(tmp_path):
    f = tmp_path / "in.txt"
    f.write_text("a\nb", encoding="utf-8")
    assert load_lines(f) == ["a", "b"]


def test_load_lines_empty_file(tmp_path):
    f = tmp_path / "in.txt"
    f.write_text("", encoding="utf-8")
    assert load_lines(f) == []


def test_load_lines_missing_file(tmp_path):
    with pytest.raises(InputReadError) as exc:
        load_lines(tmp_path / "nope.txt")
    assert isinstance(exc.value, IOError)
    assert exc.value.path == tmp_path / "nope.txt"


def test_load_lines_not_utf8(tmp_path):
    f = tmp_path / "in.bin"
    f.write_bytes(b"\xff\xfe\xfa")
    with pytest.raises(InputReadError):
        load_lines(f)


def test_template_replaces_every_occurrence():
    args = template_arguments(["-x", "%INPUT%:%INPUT%", "pre-%INPUT%-post"], "10.0.0.1")
    assert args == ("-x", "10.0.0.1:10.0.0.1", "pre-10.0.0.1-post")


def test_template_leaves_other_args_alone():
    args = ["-l", "-a", "/home", "ünïcode"]
    assert template_arguments(args, "x") == tuple(args)


def test_template_no_escaping():
    assert template_arguments(["%INPUT%"], "$(rm) %INPUT%") == ("$(rm) %INPUT%",)


def test_template_custom_placeholder():
    assert template_arguments(["{}", "%INPUT%"], "v", placeholder="{}") == ("v", "%INPUT%")


def test_output_path_without_prefix():
    assert output_path("out", "echo", "hello world") == Path("out") / "echo_hello_world.stdout"


def test_output_path_with_prefix():
    assert output_path("out", "nmap", "10.0.0.1", prefix="scan1") == Path("out") / "scan1#nmap_10.0.0.1.stdout"


def test_output_path_empty_prefix_is_no_prefix():
    assert output_path("out", "echo", "a", prefix="") == output_path("out", "echo", "a")


def test_output_path_uses_executable_basename():
    assert output_path("out", "/bin/echo", "a") == Path("out") / "echo_a.stdout"


def test_output_path_is_deterministic():
    assert output_path("d", "cmd", "x y", "p") == output_path("d", "cmd", "x y", "p")


def test_output_path_collision():
    assert output_path("d", "echo", "a b") == output_path("d", "echo", "a_b")


def test_build_jobs_one_per_line(make_config):
    config = make_config(["echo", "-n", "%INPUT%"], prefix="p", clobber=True)
    lines = ["alpha", "", "beta gamma"]
    jobs = build_jobs(config, lines)

    assert len(jobs) == len(lines)
    assert [j.index for j in jobs] == [0, 1, 2]
    assert jobs[0].command == "echo"
    assert jobs[0].arguments == ("-n", "alpha")
    assert jobs[1].arguments == ("-n", "")
    assert jobs[2].stdout_file == config.output_dir / "p#echo_beta_gamma.stdout"
    assert all(j.clobber and j.record_output for j in jobs)


def test_build_jobs_never_templates_the_executable(make_config):
    config = make_config(["%INPUT%", "%INPUT%"])
    (job,) = build_jobs(config, ["x"])
    assert job.command == "%INPUT%"
    assert job.arguments == ("x",)
