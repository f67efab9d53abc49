from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Generator
from unittest.mock import patch

import pytest
from pytest import CaptureFixture
from pytest import LogCaptureFixture

from custom_ls import __main__
from custom_ls.listermodel import ListingRequest


@pytest.fixture
def workspace() -> Generator[str, None, None]:
    with tempfile.TemporaryDirectory() as tempdir:
        for dirname in ["first", "second"]:
            os.mkdir(os.path.join(tempdir, dirname))
            for filename in ["notes.md", ".secret"]:
                with open(os.path.join(tempdir, dirname, filename), "w"):
                    pass
        yield tempdir


@pytest.fixture
def store_path(workspace: str) -> str:
    return os.path.join(workspace, "descriptions.json")


@pytest.fixture
def config_path(workspace: str, store_path: str) -> str:
    path = os.path.join(workspace, "cls.ini")
    with open(path, "w") as config_file:
        config_file.write(
            f"[store]\nstore_path = {store_path}\n\n[display]\ncolor = never\n"
        )
    return path


def _listed_requests(list_mock) -> list[ListingRequest]:
    return [call.args[0] for call in list_mock.call_args_list]


def test_parse_args_keeps_candidate_paths_in_order() -> None:
    args = __main__.parse_args(["first", "-a", "-z", "second"])

    assert args.show_hidden is True
    assert args.help is False
    assert args.paths == ["first", "-z", "second"]


def test_parse_args_long_options() -> None:
    args = __main__.parse_args(["--all", "--help", "--debug", "--config", "cls.ini"])

    assert args.show_hidden is True
    assert args.help is True
    assert args.debug is True
    assert args.config == "cls.ini"
    assert args.paths == []


def test_parse_args_describe() -> None:
    args = __main__.parse_args(["--describe", "notes.md", "meeting notes"])

    assert args.describe == ["notes.md", "meeting notes"]


def test_main_no_args_lists_cwd() -> None:
    with patch("custom_ls.__main__.Lister.list") as list_mock:
        result = __main__.main(cli_args=[])

    assert result == 0
    assert _listed_requests(list_mock) == [
        ListingRequest(directory=os.getcwd(), show_hidden=False)
    ]


def test_main_all_lists_only_existing_paths(workspace: str) -> None:
    existing = os.path.join(workspace, "first")
    missing = os.path.join(workspace, "missing")

    with patch("custom_ls.__main__.Lister.list") as list_mock:
        result = __main__.main(cli_args=["-a", existing, missing])

    assert result == 0
    assert _listed_requests(list_mock) == [
        ListingRequest(directory=existing, show_hidden=True)
    ]


def test_main_lists_in_given_order(workspace: str) -> None:
    first = os.path.join(workspace, "first")
    second = os.path.join(workspace, "second")

    with patch("custom_ls.__main__.Lister.list") as list_mock:
        __main__.main(cli_args=[second, "--all", first])

    assert [r.directory for r in _listed_requests(list_mock)] == [second, first]
    assert all(r.show_hidden for r in _listed_requests(list_mock))


def test_main_falls_back_to_cwd_when_no_path_exists(workspace: str) -> None:
    missing = os.path.join(workspace, "missing")

    with patch("custom_ls.__main__.Lister.list") as list_mock:
        result = __main__.main(cli_args=[missing, "-x"])

    assert result == 0
    assert _listed_requests(list_mock) == [
        ListingRequest(directory=os.getcwd(), show_hidden=False)
    ]


def test_main_ignores_files_as_targets(workspace: str) -> None:
    a_file = os.path.join(workspace, "first", "notes.md")

    with patch("custom_ls.__main__.Lister.list") as list_mock:
        __main__.main(cli_args=[a_file])

    assert [r.directory for r in _listed_requests(list_mock)] == [os.getcwd()]


def test_main_help_alone_does_not_list(capsys: CaptureFixture[str]) -> None:
    with patch("custom_ls.__main__.Lister.list") as list_mock:
        result = __main__.main(cli_args=["--help"])

    assert result == 0
    assert list_mock.call_count == 0
    assert "usage: cls [options] [path ...]" in capsys.readouterr().out


def test_main_help_with_directory_lists(
    workspace: str,
    capsys: CaptureFixture[str],
) -> None:
    first = os.path.join(workspace, "first")

    with patch("custom_ls.__main__.Lister.list") as list_mock:
        result = __main__.main(cli_args=["-h", first])

    assert result == 0
    assert _listed_requests(list_mock) == [ListingRequest(directory=first)]
    assert "-a, --all" in capsys.readouterr().out


def test_main_prints_listing(
    workspace: str,
    config_path: str,
    store_path: str,
    capsys: CaptureFixture[str],
) -> None:
    first = os.path.join(workspace, "first")
    notes = os.path.join(first, "notes.md")
    with open(store_path, "w") as store_file:
        json.dump({notes: "meeting notes"}, store_file)

    result = __main__.main(cli_args=["--config", config_path, first])

    assert result == 0
    assert capsys.readouterr().out == "notes.md  meeting notes\n"


def test_main_corrupt_store_reports_each_directory(
    workspace: str,
    config_path: str,
    store_path: str,
    capsys: CaptureFixture[str],
    caplog: LogCaptureFixture,
) -> None:
    with open(store_path, "w") as store_file:
        store_file.write("{broken")

    first = os.path.join(workspace, "first")
    second = os.path.join(workspace, "second")
    with caplog.at_level(logging.ERROR):
        result = __main__.main(cli_args=["--config", config_path, first, second])

    assert result == 1
    assert capsys.readouterr().out == ""
    errors = [r for r in caplog.records if "Could not parse" in r.getMessage()]
    assert len(errors) == 2


def test_main_describe_then_list(
    workspace: str,
    config_path: str,
    capsys: CaptureFixture[str],
) -> None:
    first = os.path.join(workspace, "first")
    notes = os.path.join(first, "notes.md")

    result = __main__.main(
        cli_args=["--config", config_path, "--describe", notes, "meeting notes"]
    )
    assert result == 0

    __main__.main(cli_args=["--config", config_path, "-a", first])

    assert capsys.readouterr().out == ".secret\nnotes.md  meeting notes\n"


def test_main_describe_missing_path_fails(
    workspace: str,
    config_path: str,
    store_path: str,
) -> None:
    missing = os.path.join(workspace, "missing")

    result = __main__.main(
        cli_args=["--config", config_path, "--describe", missing, "nothing"]
    )

    assert result == 1
    assert not os.path.exists(store_path)


def test_main_prune(
    workspace: str,
    config_path: str,
    store_path: str,
    capsys: CaptureFixture[str],
) -> None:
    notes = os.path.join(workspace, "first", "notes.md")
    with open(store_path, "w") as store_file:
        json.dump({notes: "kept", "/no/such/file": "dropped"}, store_file)

    result = __main__.main(cli_args=["--config", config_path, "--prune"])

    assert result == 0
    assert "Removed 1 stale descriptions." in capsys.readouterr().out
    with open(store_path) as store_file:
        assert json.load(store_file) == {notes: "kept"}


def test_main_create_config() -> None:
    cli_args = ["--make-config", "tests/new_test_config.ini"]

    with patch("custom_ls.__main__.write_new_config") as mock_write:
        result = __main__.main(cli_args=cli_args)

    assert result == 0
    mock_write.assert_called_once_with("tests/new_test_config.ini")


def test_main_undecodable_store_returns_error(
    workspace: str,
    config_path: str,
    store_path: str,
    capsys: CaptureFixture[str],
) -> None:
    with open(store_path, "wb") as store_file:
        store_file.write(b"\xff")

    result = __main__.main(
        cli_args=["--config", config_path, os.path.join(workspace, "first")]
    )

    assert result == 1
    assert capsys.readouterr().out == ""


def test_main_unreadable_directory_does_not_stop_the_run(
    workspace: str,
    config_path: str,
    capsys: CaptureFixture[str],
    caplog: LogCaptureFixture,
) -> None:
    first = os.path.join(workspace, "first")
    second = os.path.join(workspace, "second")
    listdir = os.listdir

    def fake_listdir(path: str) -> list[str]:
        if path == first:
            raise PermissionError(13, "Permission denied", path)
        return listdir(path)

    with patch("custom_ls.lister.os.listdir", side_effect=fake_listdir):
        with caplog.at_level(logging.ERROR):
            result = __main__.main(cli_args=["--config", config_path, first, second])

    assert result == 1
    assert capsys.readouterr().out == "notes.md\n"
    assert any("Permission denied" in r.getMessage() for r in caplog.records)
