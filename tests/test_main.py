from click.testing import CliRunner
from src.cli.commands import cli


def test_set_write_read_scenario(monkeypatch, tmp_path):
    monkeypatch.setenv('DIARY_HOME', str(tmp_path))
    runner = CliRunner()
    r = runner.invoke(cli, ['set-password'], input='abcd1234\nabcd1234\n')
    assert r.exit_code == 0
    assert 'unlocked' in r.output
    st = runner.invoke(cli, ['status'])
    assert 'password_set: true' in st.output
    assert 'needs_verify: false' in st.output
    w = runner.invoke(cli, ['write', '2025-06-01', '--content', 'hello world'])
    assert w.exit_code == 0
    assert '10 chars' in w.output
    rd = runner.invoke(cli, ['read', '2025-06-01'])
    assert rd.exit_code == 0
    assert 'Words: 10' in rd.output
    assert rd.output.rstrip().endswith('hello world')


def test_write_from_stdin(monkeypatch, tmp_path):
    monkeypatch.setenv('DIARY_HOME', str(tmp_path))
    runner = CliRunner()
    runner.invoke(cli, ['set-password'], input='abcd1234\nabcd1234\n')
    w = runner.invoke(cli, ['write', '2025-06-02'], input='line one\nline two\n')
    assert w.exit_code == 0
    rd = runner.invoke(cli, ['read', '2025-06-02'])
    assert 'line one\nline two' in rd.output


def test_lock_and_verify(monkeypatch, tmp_path):
    monkeypatch.setenv('DIARY_HOME', str(tmp_path))
    runner = CliRunner()
    runner.invoke(cli, ['set-password'], input='abcd1234\nabcd1234\n')
    runner.invoke(cli, ['write', '2025-06-01', '--content', 'secret'])
    assert runner.invoke(cli, ['lock']).exit_code == 0
    locked = runner.invoke(cli, ['read', '2025-06-01'])
    assert locked.exit_code == 1
    assert 'locked' in locked.output
    bad = runner.invoke(cli, ['verify'], input='wrong1234\n')
    assert bad.exit_code == 1
    assert runner.invoke(cli, ['read', '2025-06-01']).exit_code == 1
    ok = runner.invoke(cli, ['verify'], input='abcd1234\n')
    assert ok.exit_code == 0
    rd = runner.invoke(cli, ['read', '2025-06-01'])
    assert rd.exit_code == 0
    assert 'secret' in rd.output


def test_read_missing_and_reconcile(monkeypatch, tmp_path):
    monkeypatch.setenv('DIARY_HOME', str(tmp_path))
    runner = CliRunner()
    runner.invoke(cli, ['set-password'], input='abcd1234\nabcd1234\n')
    assert 'Not found' in runner.invoke(cli, ['read', '2025-06-01']).output
    rc = runner.invoke(cli, ['reconcile'])
    assert rc.exit_code == 0
    assert 'Nothing to repair' in rc.output
