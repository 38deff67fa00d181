import sys

import pytest

from netfuncs.nf_options import (
    NUM_PORTS,
    NFOptions,
    OptionsError,
    open_log,
    parse_nf_arguments,
    usage,
)


def test_parse_generic_arguments():
    options = parse_nf_arguments(["--p", "port1", "--p", "port2", "--l", "stdout", "--s", "sem"])
    assert options == NFOptions(("port1", "port2"), "stdout", "sem", ())


def test_parse_single_port_allowed_without_exact():
    options = parse_nf_arguments(["--p", "a", "--l", "stderr"])
    assert options.ports == ("a",)
    assert options.semaphore is None


def test_many_ports_allowed_without_exact():
    names = ["a", "b", "c"]
    argv = [item for name in names for item in ("--p", name)] + ["--l", "stdout"]
    assert parse_nf_arguments(argv).ports == tuple(names)


def test_equals_form_and_remaining_arguments():
    options = parse_nf_arguments(["--p=x", "--l=stdout", "extra"])
    assert options.ports == ("x",)
    assert options.remaining == ("extra",)


def test_missing_log_file():
    with pytest.raises(OptionsError, match="Not all mandatory arguments"):
        parse_nf_arguments(["--p", "a"])


def test_missing_ports():
    with pytest.raises(OptionsError, match="Not all mandatory arguments"):
        parse_nf_arguments(["--l", "stdout"])


def test_semaphore_required():
    with pytest.raises(OptionsError, match="Not all mandatory arguments"):
        parse_nf_arguments(["--p", "a", "--l", "stdout"], require_semaphore=True)
    options = parse_nf_arguments(
        ["--p", "a", "--l", "stdout", "--s", "sem"], require_semaphore=True
    )
    assert options.semaphore == "sem"


def test_exact_ports_requires_two():
    with pytest.raises(OptionsError, match="Not all mandatory arguments"):
        parse_nf_arguments(["--p", "a", "--l", "stdout"], exact_ports=True)


def test_exact_ports_rejects_three():
    argv = ["--p", "a", "--p", "b", "--p", "c", "--l", "stdout"]
    with pytest.raises(OptionsError, match="Exactly two ports must be specified"):
        parse_nf_arguments(argv, exact_ports=True)


def test_exact_ports_accepts_two():
    options = parse_nf_arguments(["--p", "a", "--p", "b", "--l", "stdout"], exact_ports=True)
    assert len(options.ports) == NUM_PORTS


def test_duplicate_semaphore():
    argv = ["--p", "a", "--l", "stdout", "--s", "one", "--s", "two"]
    with pytest.raises(OptionsError, match="'--s' appear too many times"):
        parse_nf_arguments(argv)


def test_duplicate_log():
    argv = ["--p", "a", "--l", "stdout", "--l", "stderr"]
    with pytest.raises(OptionsError, match="'--l' appear too many times"):
        parse_nf_arguments(argv)


def test_help_requested():
    with pytest.raises(OptionsError) as info:
        parse_nf_arguments(["--h"])
    assert info.value.help_requested is True


def test_unknown_option():
    with pytest.raises(OptionsError) as info:
        parse_nf_arguments(["--x", "1", "--p", "a", "--l", "stdout"])
    assert info.value.help_requested is False


def test_open_log_standard_streams():
    assert open_log("stdout") is sys.stdout
    assert open_log("stderr") is sys.stderr


def test_open_log_file(tmp_path):
    path = tmp_path / "nf.log"
    stream = open_log(str(path))
    with stream:
        stream.write("started\n")
    assert path.read_text() == "started\n"


def test_open_log_failure(tmp_path):
    with pytest.raises(OptionsError, match="Unable to open file to log!"):
        open_log(str(tmp_path / "missing" / "nf.log"))


def test_usage_texts():
    dpi = usage("DPI", exact_ports=True)
    generic = usage("EXAMPLE")
    assert dpi.startswith("\n\n[DPI] Usage:")
    assert generic.startswith("\n\n[EXAMPLE] Usage:")
    assert "This parameter must be repeated two times" in dpi
    assert "This parameter can be repeated many times" in generic
    assert "--proc-type=secondary" in dpi and "--proc-type=secondary" in generic