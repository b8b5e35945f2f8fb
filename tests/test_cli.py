import json
import logging

import pytest

from voc_tfrecord import cli, settings_manager
from voc_tfrecord.config import parse_retain_ratio, record_filename
from voc_tfrecord.errors import ConfigError
from voc_tfrecord.formats.writers.tfrecord_writer import encode_frame


@pytest.fixture(autouse=True)
def root_level():
    root = logging.getLogger()
    previous = root.level
    yield root
    root.setLevel(previous)


@pytest.mark.parametrize('text,expected', [
    ('20%', 20),
    ('20/100', 20),
    ('20', 20),
    (' 35 % ', 35),
    ('0%', 0),
    ('100', 100),
])
def test_parse_retain_ratio(text, expected):
    assert parse_retain_ratio(text) == expected


@pytest.mark.parametrize('text', ['', 'twenty', '%20', '-5', '20.5%', '300'])
def test_parse_retain_ratio_invalid(text):
    with pytest.raises(ConfigError):
        parse_retain_ratio(text)


def test_record_filename():
    assert record_filename('train') == 'train.tfrecord'


class TestSettings:
    def test_missing_file(self, tmp_path):
        assert settings_manager.load_settings(str(tmp_path / 'none.json')) == settings_manager.DEFAULT_SETTINGS

    def test_merges_defaults(self, tmp_path):
        path = tmp_path / 'settings.json'
        path.write_text(json.dumps({'retain': '10%'}))
        settings = settings_manager.load_settings(str(path))
        assert settings == {'retain': '10%', 'log_level': 'INFO'}

    def test_default_location_is_working_directory(self, tmp_path, monkeypatch):
        (tmp_path / 'voc_tfrecord_settings.json').write_text(json.dumps({'log_level': 'DEBUG'}))
        monkeypatch.chdir(tmp_path)
        assert settings_manager.load_settings()['log_level'] == 'DEBUG'

    def test_invalid_json(self, tmp_path):
        path = tmp_path / 'settings.json'
        path.write_text('{retain: ')
        assert settings_manager.load_settings(str(path)) == settings_manager.DEFAULT_SETTINGS


class TestMain:
    def test_prepare(self, tmp_path, make_example, capsys):
        make_example('a', image_bytes=b'some image')
        out = tmp_path / 'out'

        code = cli.main(['pascal-voc', 'prepare', '-i', str(tmp_path / 'dataset'), '-o', str(out),
                         '--retain', '0%'])

        assert code == 0
        assert (out / 'label_map.txt').exists()
        assert (out / 'train.tfrecord').exists()
        assert not (out / 'test.tfrecord').exists()
        assert 'found 1 examples' in capsys.readouterr().out

    def test_bad_ratio_stops_before_processing(self, tmp_path, make_example, capsys):
        make_example('a')
        out = tmp_path / 'out'

        code = cli.main(['pascal-voc', 'prepare', '-i', str(tmp_path / 'dataset'), '-o', str(out),
                         '--retain', 'lots'])

        assert code == 2
        assert not out.exists()
        assert 'retain ratio' in capsys.readouterr().err

    def test_retain_from_settings(self, tmp_path, make_example):
        make_example('a', image_bytes=b'some image')
        settings = tmp_path / 'settings.json'
        settings.write_text(json.dumps({'retain': '100%'}))
        out = tmp_path / 'out'

        code = cli.main(['--settings', str(settings), 'pascal-voc', 'prepare',
                         '-i', str(tmp_path / 'dataset'), '-o', str(out)])

        assert code == 0
        assert (out / 'test.tfrecord').exists()
        assert not (out / 'train.tfrecord').exists()

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.main([])


class TestLogging:
    def test_verbose_without_settings_file(self, tmp_path, root_level):
        root_level.setLevel(logging.WARNING)
        cli.main(['--settings', str(tmp_path / 'missing.json'), '-v', 'pascal-voc', 'prepare',
                  '-i', str(tmp_path), '-o', str(tmp_path / 'out'), '--retain', 'bad'])
        assert root_level.level == logging.DEBUG

    def test_level_from_settings(self, tmp_path, root_level):
        settings = tmp_path / 'settings.json'
        settings.write_text(json.dumps({'log_level': 'error'}))
        cli.main(['--settings', str(settings), 'pascal-voc', 'prepare',
                  '-i', str(tmp_path), '-o', str(tmp_path / 'out'), '--retain', 'bad'])
        assert root_level.level == logging.ERROR

    def test_defaults_to_info(self, tmp_path, root_level):
        root_level.setLevel(logging.WARNING)
        cli.main(['--settings', str(tmp_path / 'missing.json'), 'pascal-voc', 'prepare',
                  '-i', str(tmp_path), '-o', str(tmp_path / 'out'), '--retain', 'bad'])
        assert root_level.level == logging.INFO


class TestVerify:
    def test_valid_and_corrupt_files(self, tmp_path, capsys):
        good = tmp_path / 'good.tfrecord'
        good.write_bytes(encode_frame(b'first') + encode_frame(b'second'))
        bad = tmp_path / 'bad.tfrecord'
        corrupted = bytearray(encode_frame(b'first'))
        corrupted[12] ^= 0x01
        bad.write_bytes(bytes(corrupted))

        assert cli.main(['pascal-voc', 'verify', str(good)]) == 0
        assert 'OK, 2 record(s)' in capsys.readouterr().out

        assert cli.main(['pascal-voc', 'verify', str(good), str(bad)]) == 1
        out = capsys.readouterr().out
        assert 'bad.tfrecord: INVALID' in out

    def test_missing_file(self, tmp_path, capsys):
        assert cli.main(['pascal-voc', 'verify', str(tmp_path / 'none.tfrecord')]) == 1
        assert 'INVALID' in capsys.readouterr().out

    def test_prepared_output(self, tmp_path, make_example, capsys):
        make_example('a', image_bytes=b'some image')
        out = tmp_path / 'out'
        cli.main(['pascal-voc', 'prepare', '-i', str(tmp_path / 'dataset'), '-o', str(out), '--retain', '0'])
        capsys.readouterr()

        assert cli.main(['pascal-voc', 'verify', str(out / 'train.tfrecord')]) == 0
        assert 'OK, 1 record(s)' in capsys.readouterr().out
