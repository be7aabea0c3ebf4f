from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st
from tsscctl.config import Config, coerce_bool, expand, flatten, parse_overrides

FIXTURE = (Path(__file__).resolve().parent / "fixtures" / "config.yaml").read_bytes()

_KEYS = st.from_regex(r"[a-z][a-z0-9_]{0,7}", fullmatch=True)
_LEAVES = st.none() | st.booleans() | st.integers() | st.text(max_size=8) | st.lists(st.integers(), max_size=3)
_TREES = st.dictionaries(
    _KEYS,
    st.recursive(_LEAVES, lambda children: st.dictionaries(_KEYS, children, min_size=1, max_size=4), max_leaves=12),
    min_size=1,
    max_size=5,
)
_PRINTABLE = st.text(alphabet=st.characters(min_codepoint=32, max_codepoint=126), max_size=24)


@pytest.mark.unit
@given(_TREES)
def test_expand_inverts_flatten_for_dot_free_keys(tree: dict[str, object]) -> None:
    paths, values = flatten(tree)
    assert len(paths) == len(values)
    assert expand(dict(zip(paths, values))) == tree


@pytest.mark.unit
@given(st.lists(st.tuples(st.from_regex(r"[a-z]{1,6}(\.[a-z]{1,6}){0,2}", fullmatch=True), _PRINTABLE), min_size=1))
def test_plain_overrides_keep_last_value_per_key(pairs: list[tuple[str, str]]) -> None:
    expected = {key: coerce_bool(value) for key, value in pairs}
    tree = parse_overrides([f"{key}={value}" for key, value in pairs])
    assert tree == {"setting": expected}


@pytest.mark.unit
@given(_PRINTABLE)
def test_text_written_to_string_slot_reads_back_unchanged(value: str) -> None:
    config = Config.from_bytes(FIXTURE)
    config.set("tssc.settings.ci.label", value)
    assert config.document.to_python()["tssc"]["settings"]["ci"]["label"] == value
    reloaded = Config.from_bytes(config.serialize())
    assert reloaded.spec.settings is not None
    assert reloaded.spec.settings["ci"]["label"] == value
    assert reloaded.spec.settings["mode"] == "standard"


@pytest.mark.unit
@given(st.integers(), st.booleans(), st.floats(allow_nan=False) | st.sampled_from([1e16, 1e-05, -2e300]))
def test_typed_values_keep_their_type(replicas: int, crc: bool, ratio: float) -> None:
    config = Config.from_bytes(FIXTURE)
    config.set_many(["tssc.settings.replicas", "tssc.settings.crc", "tssc.settings.ratio"], [replicas, crc, ratio])
    settings = config.decode().settings
    assert settings is not None
    assert settings["replicas"] == replicas
    assert settings["crc"] is crc
    assert isinstance(settings["ratio"], float)
    assert settings["ratio"] == ratio
    untouched = FIXTURE.split(b"  extra:")[1]
    assert config.serialize().endswith(untouched)
