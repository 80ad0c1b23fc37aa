from __future__ import annotations

import functools
import json
import logging

import httpx
import pytest

from postcode_nl import Client
from postcode_nl import main as cli


@pytest.fixture
def cli_env(monkeypatch, tmp_path, recorder):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('POSTCODE_NL_KEY', 'cli-key')
    monkeypatch.setenv('POSTCODE_NL_SECRET', 'cli-secret')
    monkeypatch.delenv('POSTCODE_NL_SESSION', raising=False)
    monkeypatch.setattr(cli, 'Client', functools.partial(Client, transport=httpx.MockTransport(recorder.handler)))
    return recorder


def test_postcode_command(cli_env, capsys) -> None:
    cli_env.respond(200, '{"street": "Julianastraat", "houseNumber": 30}')
    assert cli.main(['postcode', '2012 ES', '30']) == 0
    assert cli_env.last.url.raw_path == b'/nl/v1/addresses/postcode/2012%20ES/30'
    out = capsys.readouterr().out
    assert json.loads(out) == {'street': 'Julianastraat', 'houseNumber': 30}


def test_platform_override(cli_env) -> None:
    assert cli.main(['--platform', 'cli test', 'account-info']) == 0
    assert cli_env.last.headers['User-Agent'].startswith('cli test ')


def test_autocomplete_generates_session(cli_env) -> None:
    assert cli.main(['autocomplete', 'nld', 'Haarlem']) == 0
    session = cli_env.last.headers['X-Autocomplete-Session']
    assert len(session) == 32


def test_autocomplete_session_from_env(cli_env, monkeypatch) -> None:
    monkeypatch.setenv('POSTCODE_NL_SESSION', 'env-session-1')
    assert cli.main(['details', 'ctx']) == 0
    assert cli_env.last.headers['X-Autocomplete-Session'] == 'env-session-1'


def test_validate_resolves_country_name(cli_env) -> None:
    cli_env.respond(200, '{"iso3": "NLD"}')
    assert cli.main(['validate', 'Netherlands', '--postcode', '2012ES', '--building', '30']) == 0
    first, second = cli_env.requests
    assert first.url.raw_path == b'/international/v1/country/Netherlands'
    assert second.url.raw_path == b'/international/v1/validate/nld?postcode=2012ES&building=30'


def test_validate_with_iso3(cli_env) -> None:
    assert cli.main(['validate', 'BEL', '--street-and-building', 'Grote Markt 1']) == 0
    assert len(cli_env.requests) == 1
    assert cli_env.last.url.raw_path == b'/international/v1/validate/bel?streetAndBuilding=Grote%20Markt%201'


def test_create_account_command(cli_env) -> None:
    argv = ['create-account', '--company-name', 'Acme', '--site-url', 'https://a.example',
            '--site-url', 'https://b.example', '--subscription-amount', '2', '--test']
    assert cli.main(argv) == 0
    body = cli_env.last.content.decode()
    assert 'siteUrls=https%3A%2F%2Fa.example&siteUrls=https%3A%2F%2Fb.example' in body
    assert 'isTest=1' in body


def test_api_error_exit_code(cli_env, capsys, caplog) -> None:
    caplog.set_level(logging.INFO, logger='postcode_nl.main')
    cli_env.respond(401, '')
    assert cli.main(['countries']) == 1
    assert 'AUTHENTICATION' in capsys.readouterr().out
    events = [json.loads(r.getMessage())['event'] for r in caplog.records if r.name == 'postcode_nl.main']
    assert events == ['startup', 'error']


def test_invalid_postcode_makes_no_request(cli_env) -> None:
    assert cli.main(['ranges', '0123AB']) == 1
    assert cli_env.requests == []


def test_headers_flag(cli_env, capsys) -> None:
    cli_env.respond(200, '[]', headers=[('X-Ratelimit-Remaining', '99')])
    assert cli.main(['--headers', 'countries']) == 0
    out = capsys.readouterr().out
    assert 'x-ratelimit-remaining' in out
    assert '99' in out


def test_missing_credentials(monkeypatch, tmp_path, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv('POSTCODE_NL_KEY', raising=False)
    monkeypatch.delenv('POSTCODE_NL_SECRET', raising=False)
    assert cli.main(['account-info']) == 1
    assert 'Configuration error' in capsys.readouterr().out


@pytest.mark.parametrize('postcode, code', [('2012ES', 0), ('0123AB', 1)])
def test_check_postcode_needs_no_credentials(monkeypatch, tmp_path, postcode, code) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv('POSTCODE_NL_KEY', raising=False)
    assert cli.main(['check-postcode', postcode]) == code


@pytest.mark.parametrize('body', ['[]', '{"name": "Netherlands"}'])
def test_validate_country_without_iso3(cli_env, capsys, caplog, body) -> None:
    caplog.set_level(logging.INFO, logger='postcode_nl.main')
    cli_env.respond(200, body)
    assert cli.main(['validate', 'Netherlands']) == 1
    assert len(cli_env.requests) == 1
    assert 'No iso3 code' in capsys.readouterr().out
    records = [json.loads(r.getMessage()) for r in caplog.records if r.name == 'postcode_nl.main']
    assert records[-1]['event'] == 'error'
    assert records[-1]['url'] == 'https://api.postcode.eu/international/v1/country/Netherlands'


def test_sent_event_carries_url_and_status(cli_env, caplog) -> None:
    caplog.set_level(logging.INFO, logger='postcode_nl.main')
    assert cli.main(['account-info']) == 0
    records = [json.loads(r.getMessage()) for r in caplog.records if r.name == 'postcode_nl.main']
    assert records[-1] == {
        'event': 'sent',
        'command': 'account-info',
        'url': 'https://api.postcode.eu/account/v1/info',
        'status': 200,
    }
