# /tests/test_scripts/test_toggle_maintenance.py
import json

import pytest

from portal.services.maintenance import MaintenanceStore
from scripts.toggle_maintenance import main


@pytest.fixture
def flag_file(tmp_path):
    return tmp_path / 'maintenance.json'


def test_on_off_status(flag_file, capsys):
    assert main(['--file', str(flag_file), 'on', '--message', 'Neue Server', '--until', '2026-10-20T06:00']) == 0
    record = json.loads(flag_file.read_text(encoding='utf-8'))
    assert record['message'] == 'Neue Server'
    assert record['estimatedEnd'] == '2026-10-20T06:00'

    main(['--file', str(flag_file), 'status'])
    out = capsys.readouterr().out
    assert 'Maintenance enabled (revision 1)' in out
    assert 'Neue Server' in out

    main(['--file', str(flag_file), 'off'])
    assert not flag_file.exists()
    assert MaintenanceStore(flag_file).read().revision == 2


def test_status_when_off(flag_file, capsys):
    main(['--file', str(flag_file), 'status'])
    assert 'Maintenance disabled (revision 0)' in capsys.readouterr().out


def test_command_required(flag_file):
    with pytest.raises(SystemExit):
        main(['--file', str(flag_file)])
