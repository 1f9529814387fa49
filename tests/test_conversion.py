"""Tests for the input deck -> Broombridge conversion."""

import tempfile
from pathlib import Path

import pytest

from nwchem_docker.container import ContainerResult
from nwchem_docker.conversion import (
    CONTAINER_DATA_DIR,
    _missing_output_message,
    convert_input_to_output,
    default_destination,
    expected_output_name,
    is_windows,
    normalize_mount_path,
    resolve_destination,
    staging_directory,
    volume_mount,
)

H2_DECK = """title "H2"
start h2
geometry
  H 0.0 0.0 0.0
  H 0.0 0.0 0.74
end
basis
  * library sto-3g
end
task scf energy
"""

BROOMBRIDGE = "format:\n  version: '0.2'\nproblem_description: []\n"


class FakeInvoker:
    """Stands in for invoke_container_image; optionally writes the output file."""

    def __init__(self, produce=True, returncode=0, content=BROOMBRIDGE):
        self.produce = produce
        self.returncode = returncode
        self.content = content
        self.calls = []
        self.staging = None

    def __call__(self, docker_args, command_args, skip_pull, tag, image, docker_command):
        self.calls.append({
            "docker_args": docker_args,
            "command_args": command_args,
            "skip_pull": skip_pull,
            "tag": tag,
            "image": image,
            "docker_command": docker_command,
        })
        host_path, _ = docker_args[1].rsplit(":" + CONTAINER_DATA_DIR, 1)
        self.staging = Path(host_path)
        assert self.staging.is_dir()
        assert (self.staging / command_args[0]).is_file()
        if self.produce:
            name = Path(command_args[0]).with_suffix(".yaml").name
            (self.staging / name).write_bytes(self.content.encode("utf-8"))
        return ContainerResult(command=["docker", "run"], returncode=self.returncode)


@pytest.fixture
def deck(tmp_path):
    path = tmp_path / "sample.nw"
    path.write_text(H2_DECK)
    return path


def test_default_destination():
    assert default_destination("sample.nw") == Path("sample.yaml")
    assert default_destination("/work/run1/h2o.nw") == Path("/work/run1/h2o.yaml")
    assert default_destination(Path("decks/lih")) == Path("decks/lih.yaml")


def test_resolve_destination():
    assert resolve_destination("sample.nw") == Path("sample.yaml")
    assert resolve_destination("sample.nw", "out/other.yaml") == Path("out/other.yaml")


def test_expected_output_name_ignores_destination():
    assert expected_output_name("/work/sample.nw") == "sample.yaml"
    assert expected_output_name(Path("a/b/h2.inp")) == "h2.yaml"


def test_is_windows():
    assert is_windows("win32")
    assert is_windows("cygwin")
    assert not is_windows("linux")
    assert not is_windows("darwin")


def test_normalize_mount_path_windows():
    path = r"C:\Users\me\AppData\Local\Temp\nwchem-docker-abc"
    assert normalize_mount_path(path, platform="win32") == "C:/Users/me/AppData/Local/Temp/nwchem-docker-abc"


def test_normalize_mount_path_other_platforms():
    assert normalize_mount_path("/tmp/nwchem-docker-abc", platform="linux") == "/tmp/nwchem-docker-abc"
    assert normalize_mount_path(r"odd\name", platform="darwin") == r"odd\name"


def test_volume_mount():
    assert volume_mount("/tmp/stage", platform="linux") == "/tmp/stage:/opt/data"
    assert volume_mount(r"C:\Temp\stage", platform="win32") == "C:/Temp/stage:/opt/data"


def test_missing_output_message_mentions_drive_sharing_on_windows():
    assert "shared with Docker" in _missing_output_message("h2.yaml", platform="win32")
    assert "shared with Docker" not in _missing_output_message("h2.yaml", platform="linux")
    assert "h2.yaml" in _missing_output_message("h2.yaml", platform="linux")


def test_staging_directory_removed_on_exit():
    with staging_directory() as staging:
        assert staging.is_dir()
        assert Path(tempfile.gettempdir()).resolve() in staging.resolve().parents
        (staging / "scratch").mkdir()
        (staging / "scratch" / "file.txt").write_text("x")
    assert not staging.exists()


def test_staging_directory_removed_on_error():
    with pytest.raises(RuntimeError, match="boom"):
        with staging_directory() as staging:
            saved = staging
            raise RuntimeError("boom")
    assert not saved.exists()


def test_staging_directories_are_unique():
    with staging_directory() as first, staging_directory() as second:
        assert first != second


def test_convert_end_to_end(deck, capsys):
    """sample.nw -> sample.yaml next to the deck, staging removed afterwards."""
    invoker = FakeInvoker()
    result = convert_input_to_output(deck, invoker=invoker)

    destination = deck.parent / "sample.yaml"
    assert result.destination == destination
    assert result.output_name == "sample.yaml"
    assert result.output_found
    assert result.succeeded
    assert destination.read_text() == BROOMBRIDGE
    assert not invoker.staging.exists()

    call = invoker.calls[0]
    assert call["docker_args"][0] == "-v"
    assert call["docker_args"][1].endswith(":/opt/data")
    assert call["command_args"] == ["sample.nw"]
    assert call["skip_pull"] is False
    assert call["tag"] == "latest"
    assert call["image"] == "nwchemorg/nwchem-qc"
    assert call["docker_command"] == "docker"
    assert "Wrote" in capsys.readouterr().out


def test_convert_forwards_options(deck):
    invoker = FakeInvoker()
    convert_input_to_output(
        deck,
        skip_pull=True,
        tag="6.8",
        image="myorg/nwchem",
        docker_command="podman",
        invoker=invoker,
    )
    call = invoker.calls[0]
    assert call["skip_pull"] is True
    assert call["tag"] == "6.8"
    assert call["image"] == "myorg/nwchem"
    assert call["docker_command"] == "podman"


def test_convert_custom_destination_uses_input_name_for_lookup(deck, tmp_path):
    destination = tmp_path / "results" / "renamed.yaml"
    invoker = FakeInvoker()
    result = convert_input_to_output(deck, destination_path=destination, invoker=invoker)

    assert result.output_name == "sample.yaml"
    assert result.destination == destination
    assert destination.read_text() == BROOMBRIDGE
    assert not (deck.parent / "sample.yaml").exists()


def test_convert_copies_bytes_exactly(deck):
    content = "format:\n  version: '0.2'\r\nproblem_description: []  # ünïcode\n"
    invoker = FakeInvoker(content=content)
    result = convert_input_to_output(deck, invoker=invoker)
    assert result.destination.read_bytes() == content.encode("utf-8")


def test_convert_missing_output_is_reported_not_raised(deck, capsys):
    destination = deck.parent / "sample.yaml"
    destination.write_text("previous result")
    invoker = FakeInvoker(produce=False, returncode=1)

    result = convert_input_to_output(deck, invoker=invoker)

    assert not result.output_found
    assert not result.succeeded
    assert result.container.returncode == 1
    assert destination.read_text() == "previous result"
    assert not invoker.staging.exists()
    out = capsys.readouterr().out
    assert "Error: Expected output sample.yaml" in out
    assert "exited with code 1" in out


def test_convert_missing_output_does_not_create_destination(deck):
    result = convert_input_to_output(deck, invoker=FakeInvoker(produce=False))
    assert not result.destination.exists()


def test_convert_cleans_up_when_invoker_raises(deck, tmp_path, monkeypatch):
    temp_root = tmp_path / "tmp"
    temp_root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(temp_root))

    def broken_invoker(**kwargs):
        raise OSError("docker not found")

    with pytest.raises(OSError, match="docker not found"):
        convert_input_to_output(deck, invoker=broken_invoker)
    assert list(temp_root.iterdir()) == []


def test_convert_missing_input_propagates_and_cleans_up(tmp_path, monkeypatch):
    temp_root = tmp_path / "tmp"
    temp_root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(temp_root))
    invoker = FakeInvoker()

    with pytest.raises(FileNotFoundError):
        convert_input_to_output(tmp_path / "missing.nw", invoker=invoker)
    assert invoker.calls == []
    assert list(temp_root.iterdir()) == []


def test_extension_swap_for_bare_dot_names():
    assert expected_output_name(".nw") == ".yaml"
    assert default_destination("decks/.nw") == Path("decks/.yaml")
    assert expected_output_name("h2.nw.bak") == "h2.nw.yaml"
