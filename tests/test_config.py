import pytest

from qen.config import CONFIG_FILE_NAME, QenConfig, find_config_file, load_config
from qen.exceptions import ConfigError


def test_defaults():
    config = QenConfig()

    assert config.root_name == "root"
    assert config.type_suffix == "Input"
    assert config.element_suffix == "Element"
    assert config.function_prefix == "render_"
    assert config.namespace is None
    assert config.output_suffix == ".py"


def test_load_yaml(tmp_path):
    path = tmp_path / CONFIG_FILE_NAME
    path.write_text("root_name: rows\nnamespace: views\n")

    config = QenConfig.load(path)

    assert config.root_name == "rows"
    assert config.namespace == "views"
    assert config.type_suffix == "Input"


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / CONFIG_FILE_NAME
    path.write_text("")
    assert QenConfig.load(path) == QenConfig()


def test_unknown_key_is_rejected(tmp_path):
    path = tmp_path / CONFIG_FILE_NAME
    path.write_text("root: rows\n")

    with pytest.raises(ConfigError):
        QenConfig.load(path)


def test_root_name_must_be_an_identifier(tmp_path):
    path = tmp_path / CONFIG_FILE_NAME
    path.write_text("root_name: not-a-name\n")

    with pytest.raises(ConfigError):
        QenConfig.load(path)


def test_top_level_must_be_a_mapping(tmp_path):
    path = tmp_path / CONFIG_FILE_NAME
    path.write_text("- root_name\n")

    with pytest.raises(ConfigError):
        QenConfig.load(path)


def test_malformed_yaml(tmp_path):
    path = tmp_path / CONFIG_FILE_NAME
    path.write_text("root_name: [unclosed\n")

    with pytest.raises(ConfigError):
        QenConfig.load(path)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        QenConfig.load(tmp_path / CONFIG_FILE_NAME)


def test_merged_ignores_unset_overrides():
    config = QenConfig(namespace="views")
    merged = config.merged(root_name="items", namespace=None)

    assert merged.root_name == "items"
    assert merged.namespace == "views"
    assert config.root_name == "root"


def test_merged_validates():
    with pytest.raises(ConfigError):
        QenConfig().merged(root_name="1bad")


def test_find_config_file_searches_parents(tmp_path):
    (tmp_path / CONFIG_FILE_NAME).write_text("root_name: rows\n")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    assert find_config_file(nested) == tmp_path / CONFIG_FILE_NAME


def test_load_config_discovers_file(tmp_path, monkeypatch):
    (tmp_path / CONFIG_FILE_NAME).write_text("type_suffix: Data\n")
    monkeypatch.chdir(tmp_path)

    assert load_config().type_suffix == "Data"
