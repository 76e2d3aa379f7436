"""Tests for the ds command line interface."""
import json
import pytest
from typer.testing import CliRunner

from dsbase import DsClient, SQLiteTokenStore
from dsbase.cli import main as cli


runner = CliRunner()


@pytest.fixture
def storage(tmp_path):
    return str(tmp_path / "cli.storage")


@pytest.fixture
def wired(monkeypatch, http, storage):
    """Routes CLI clients to the scripted session."""
    def make_client():
        return DsClient(
            SQLiteTokenStore(storage),
            origin=cli.state['origin'],
            user=cli.state['user'],
            repo=cli.state['repo'],
            session=http.session,
        )

    monkeypatch.setattr(cli, 'make_client', make_client)
    return http


def invoke(storage, *args):
    return runner.invoke(
        cli.app,
        ['--origin', 'https://apps.example.com', '--user', 'octocat', '--repo', 'site',
         '--storage', storage, *args]
    )


def stored_token(storage):
    with SQLiteTokenStore(storage) as store:
        return store.get_token()


def test_login_stores_token(wired, storage):
    wired.respond(200, json.dumps({'token': 'T'}))

    result = invoke(storage, 'login', '-u', 'octocat', '-p', 'secret')

    assert result.exit_code == 0
    assert 'Logged in as octocat' in result.output
    assert stored_token(storage) == 'T'


def test_login_failure_exits_with_code(wired, storage):
    wired.respond(403)

    result = invoke(storage, 'login', '-u', 'octocat', '-p', 'wrong')

    assert result.exit_code == 1
    assert 'error 403' in result.output
    assert stored_token(storage) is None


def test_login_token(wired, storage):
    wired.respond(200)

    result = invoke(storage, 'login-token', 'external')

    assert result.exit_code == 0
    assert stored_token(storage) == 'external'


def test_logout_and_whoami(wired, storage):
    with SQLiteTokenStore(storage) as store:
        store.set_token('T')

    assert invoke(storage, 'whoami').exit_code == 0

    result = invoke(storage, 'logout')
    assert result.exit_code == 0
    assert 'Logged out' in result.output

    assert invoke(storage, 'whoami').exit_code == 1
    assert 'No active session' in invoke(storage, 'logout').output


def test_ls_table(wired, storage):
    wired.respond(200, json.dumps([{'name': 'a.json', 'size': 3}]))

    result = invoke(storage, 'ls')

    assert result.exit_code == 0
    assert 'a.json' in result.output


def test_ls_malformed(wired, storage):
    wired.respond(200, '[')

    result = invoke(storage, 'ls')

    assert result.exit_code == 1
    assert 'error 500' in result.output


def test_download_to_file(wired, storage, tmp_path):
    wired.respond(200, '{"a": 1}')
    output = tmp_path / 'out.json'

    result = invoke(storage, 'download', 'f.json', '-o', str(output))

    assert result.exit_code == 0
    assert json.loads(output.read_text()) == {'a': 1}


def test_download_corrupt(wired, storage):
    wired.respond(200, 'not json')

    result = invoke(storage, 'download', 'f.json')

    assert result.exit_code == 1
    assert 'error 415' in result.output


def test_upload_file(wired, storage, tmp_path):
    source = tmp_path / 'logo.png'
    source.write_bytes(b'PNG')
    wired.respond(200)

    result = invoke(storage, 'upload', str(source))

    assert result.exit_code == 0
    assert 'logo.png' in result.output
    method, url, _ = wired.call()
    assert url.endswith('/api/upload')


def test_upload_object_rejects_bad_json(wired, storage):
    result = invoke(storage, 'upload-object', 'f.json', '{oops')

    assert result.exit_code == 1
    assert wired.count == 0


def test_upload_object_rejects_scalar(wired, storage):
    result = invoke(storage, 'upload-object', 'f.json', '42')

    assert result.exit_code == 1
    assert wired.count == 0


def test_rm_forced(wired, storage):
    wired.respond(200)

    result = invoke(storage, 'rm', 'old.json', '--force')

    assert result.exit_code == 0
    assert json.loads(wired.call()[2]['data'])['filename'] == 'old.json'


def test_versions(wired, storage):
    wired.respond(200, json.dumps({'server': '1.4.2'}))

    result = invoke(storage, 'versions')

    assert result.exit_code == 0
    assert '1.4.2' in result.output


def test_startup_get_and_set(wired, storage):
    wired.respond(200, json.dumps({'startup': 'https://apps.example.com/home'}))

    assert 'https://apps.example.com/home' in invoke(storage, 'startup').output

    result = invoke(storage, 'startup', '--set', 'https://apps.example.com/new')
    assert result.exit_code == 0
    assert json.loads(wired.call()[2]['data']) == {'startup': 'https://apps.example.com/new'}


@pytest.mark.parametrize('action', ['install', 'update'])
def test_install_and_update(wired, storage, action):
    wired.respond(200)

    result = invoke(storage, action)

    assert result.exit_code == 0
    assert json.loads(wired.call()[2]['data']) == {'user': 'octocat', 'repo': 'site'}


def test_missing_origin_reported(wired, storage):
    result = runner.invoke(cli.app, ['--storage', storage, 'ls'])

    assert result.exit_code == 1
    assert 'set_base' in result.output
    assert wired.count == 0


def test_logout_goes_through_client(monkeypatch, http, storage):
    resets = []

    def make_client():
        client = DsClient(SQLiteTokenStore(storage), session=http.session)
        client.on('reset', lambda: resets.append(True))
        return client

    monkeypatch.setattr(cli, 'make_client', make_client)
    with SQLiteTokenStore(storage) as store:
        store.set_token('T')

    result = invoke(storage, 'logout')

    assert result.exit_code == 0
    assert resets == [True]
    assert stored_token(storage) is None
