from __future__ import annotations

from pathlib import Path

import pytest

from kvedge.conf.ordered_partitioned import OrderedPartitionedKVEdgeConfigurer
from kvedge.conf.sources import (
    ALL_RECOGNIZED_KEYS,
    config_from_source,
    env_var_name,
    flatten_mapping,
    load_source,
    source_from_env,
    source_from_toml,
    source_from_yaml,
)
from kvedge.core.constants import IO_SORT_MB, KEY_CLASS, KEY_COMPARATOR_CLASS, SHUFFLE_MERGE_PERCENT
from kvedge.core.errors import ConfigurationError, InvalidOverride


def _write(tmp: Path, name: str, content: str) -> Path:
    p = tmp / name
    p.write_text(content)
    return p


def test_env_var_name_spelling() -> None:
    assert env_var_name(KEY_CLASS) == "KVEDGE_TEZ_RUNTIME_KEY_CLASS"
    assert env_var_name(IO_SORT_MB, "JOB_") == "JOB_TEZ_RUNTIME_IO_SORT_MB"


def test_recognized_keys_are_unique() -> None:
    assert len(ALL_RECOGNIZED_KEYS) == len(set(ALL_RECOGNIZED_KEYS))
    assert KEY_CLASS in ALL_RECOGNIZED_KEYS
    assert SHUFFLE_MERGE_PERCENT in ALL_RECOGNIZED_KEYS


def test_flatten_mapping_joins_nested_tables() -> None:
    assert flatten_mapping({"tez": {"runtime": {"io.sort.mb": 64}}, "x": 1}) == {
        "tez.runtime.io.sort.mb": 64,
        "x": 1,
    }


def test_config_from_source_filters_and_coerces() -> None:
    picked = config_from_source(
        {KEY_CLASS: "Text", IO_SORT_MB: 64, "tez.runtime.compress": False, "other": "x", "p.a": None},
        ALL_RECOGNIZED_KEYS,
    )
    assert picked == {KEY_CLASS: "Text", IO_SORT_MB: "64", "tez.runtime.compress": "false"}


def test_config_from_source_rejects_non_scalars() -> None:
    with pytest.raises(InvalidOverride):
        config_from_source({KEY_CLASS: {"nested": "x"}}, [KEY_CLASS])


def test_source_from_env_reads_explicit_mapping() -> None:
    env = {
        "KVEDGE_TEZ_RUNTIME_KEY_CLASS": "Text",
        "KVEDGE_TEZ_RUNTIME_TASK_INPUT_POST_MERGE_BUFFER_PERCENT": "0.1",
        "KVEDGE_TEZ_RUNTIME_IO_SORT_MB": "",
        "OTHER_TEZ_RUNTIME_VALUE_CLASS": "Ignored",
    }
    assert source_from_env(environ=env) == {
        KEY_CLASS: "Text",
        "tez.runtime.task.input.post-merge.buffer.percent": "0.1",
    }


def test_load_source_precedence_env_over_toml(tmp_path: Path, monkeypatch) -> None:
    # Arrange TOML
    _write(
        tmp_path,
        "kvedge.toml",
        """
        [runtime]
        "tez.runtime.key.class" = "LongWritable"
        "tez.runtime.io.sort.mb" = 128
        "tez.runtime.compress" = true
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    # Arrange ENV that should override TOML
    monkeypatch.setenv("KVEDGE_TEZ_RUNTIME_KEY_CLASS", "Text")

    source = load_source()

    assert source[KEY_CLASS] == "Text"  # env override
    assert source[IO_SORT_MB] == 128
    assert source["tez.runtime.compress"] is True


def test_load_source_from_pyproject_tool_table(tmp_path: Path, monkeypatch) -> None:
    _write(
        tmp_path,
        "pyproject.toml",
        """
        [project]
        name = "job"

        [tool.kvedge.runtime.tez.runtime.shuffle]
        "merge.percent" = 0.75
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)

    assert load_source(environ={}) == {SHUFFLE_MERGE_PERCENT: 0.75}


def test_load_source_without_files_is_env_only(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert load_source(environ={"KVEDGE_TEZ_RUNTIME_IO_SORT_MB": "32"}) == {IO_SORT_MB: "32"}
    assert source_from_toml() == {}


def test_kvedge_toml_without_runtime_table_uses_top_level(tmp_path: Path) -> None:
    p = _write(tmp_path, "edge.toml", '"tez.runtime.key.comparator.class" = "Reverse"\n')
    assert source_from_toml(p) == {KEY_COMPARATOR_CLASS: "Reverse"}


def test_yaml_source_with_partitioner_settings(tmp_path: Path) -> None:
    p = _write(
        tmp_path,
        "edge.yaml",
        """
runtime:
  tez.runtime.key.class: Text
  tez.runtime.partitioner.conf.num.buckets: 16
""",
    )
    source = load_source(p, environ={})
    edge = (
        OrderedPartitionedKVEdgeConfigurer.new_builder("LongWritable", "IntWritable", "HashPartitioner")
        .configure_from_external_source(source)
        .build()
    )

    assert source_from_yaml(p)[KEY_CLASS] == "Text"
    assert edge.output_configuration.key_class_name == "Text"
    assert edge.input_configuration.key_class_name == "Text"
    assert edge.output_configuration.partitioner.settings == {"num.buckets": "16"}


@pytest.mark.parametrize(
    "name,content",
    [("bad.toml", "not = [valid"), ("bad.yaml", "a: [1, 2"), ("list.yml", "- a\n- b\n")],
)
def test_malformed_files_raise_configuration_error(tmp_path: Path, name: str, content: str) -> None:
    p = _write(tmp_path, name, content)
    with pytest.raises(ConfigurationError):
        load_source(p, environ={})


@pytest.mark.parametrize("name", ["missing.toml", "missing.yaml"])
def test_explicit_missing_file_raises(tmp_path: Path, name: str) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        load_source(tmp_path / name, environ={})


def test_compress_pair_as_quoted_toml_keys(tmp_path: Path) -> None:
    p = _write(
        tmp_path,
        "edge.toml",
        """
        [runtime]
        "tez.runtime.compress" = true
        "tez.runtime.compress.codec" = "SnappyCodec"
        """.strip(),
    )
    edge = (
        OrderedPartitionedKVEdgeConfigurer.new_builder("Text", "IntWritable", "HashPartitioner")
        .configure_from_external_source(load_source(p, environ={}))
        .build()
    )

    assert edge.output_configuration.compression_codec == "SnappyCodec"
    assert edge.input_configuration.compression_codec == "SnappyCodec"


def test_compress_pair_as_unquoted_dotted_toml_keys_is_an_error(tmp_path: Path) -> None:
    p = _write(
        tmp_path,
        "edge.toml",
        """
        [runtime]
        tez.runtime.compress = true
        tez.runtime.compress.codec = "SnappyCodec"
        """.strip(),
    )
    with pytest.raises(ConfigurationError, match="invalid TOML"):
        load_source(p, environ={})
