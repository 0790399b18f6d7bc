from pathlib import Path

import pytest

from materials_ngrams.config import AnalysisConfig, VocabularySettings, parse_category, policy_from_args
from materials_ngrams.engine import NgramAnalyzer
from materials_ngrams.errors import ConfigurationError
from materials_ngrams.models import Coverage, MinimumCount


def test_per_n_coverage_defaults():
    cfg = AnalysisConfig().validate()
    assert [cfg.policy_for(n, 1000) for n in (1, 2, 3, 4)] == [
        Coverage(0.8), Coverage(0.6), Coverage(0.4), Coverage(0.2),
    ]
    assert cfg.policy_for(7, 1000) == Coverage(0.2)


def test_min_count_floor_is_one_percent_of_documents():
    cfg = AnalysisConfig(mode="min-count").validate()
    assert cfg.policy_for(1, 250) == MinimumCount(2)
    assert cfg.policy_for(3, 99) == MinimumCount(0)


def test_overrides_win():
    cfg = AnalysisConfig(overrides={2: MinimumCount(5)}).validate()
    assert cfg.policy_for(2, 10) == MinimumCount(5)
    assert cfg.policy_for(1, 10) == Coverage(0.8)


@pytest.mark.parametrize("kwargs", [
    {"sizes": (0,)},
    {"sizes": ()},
    {"mode": "top-k"},
    {"coverage": {1: 1.2}},
    {"min_count_share": -0.5},
])
def test_invalid_config_is_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        AnalysisConfig(**kwargs).validate()


def test_configuration_error_is_a_value_error():
    with pytest.raises(ValueError):
        AnalysisConfig().policy_for(0, 10)


def test_bad_config_fails_before_loading(tmp_path: Path):
    # the data file does not exist either; the config error must come first
    with pytest.raises(ConfigurationError):
        NgramAnalyzer.create(tmp_path / "missing.json", config=AnalysisConfig(sizes=(-1,)))


def test_vocabulary_settings_validation():
    assert VocabularySettings().validate().candidates == 5
    with pytest.raises(ConfigurationError):
        VocabularySettings(candidates=0).validate()


def test_policy_from_args():
    assert policy_from_args("coverage", threshold=0.5) == Coverage(0.5)
    assert policy_from_args("min-count", floor=3) == MinimumCount(3)
    assert policy_from_args("coverage") is None
    with pytest.raises(ConfigurationError):
        policy_from_args("min-count", floor=-2)


def test_parse_category():
    assert parse_category(None) is None
    assert parse_category("All") is None
    assert parse_category("Painting") == "Painting"
