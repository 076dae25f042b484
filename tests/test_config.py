import json

import pytest

from repo_bootstrap.config import (
    DEFAULT_LABELS,
    BypassActor,
    ConfigError,
    SetupConfig,
    config_from_dict,
    load_config,
)


def test_defaults_match_recommended_posture():
    config = SetupConfig()
    assert config.merge.enable_squash_merge is True
    assert config.merge.enable_rebase_merge is False
    assert config.merge.enable_merge_commit is False
    assert config.security.enable_secret_scanning is True
    assert config.ruleset.require_signed_commits is False
    assert config.ruleset.pull_request.required_approving_review_count == 0
    assert config.ruleset.status_checks.contexts[:2] == ("lint", "type-check")
    assert config.ruleset.bypass_actors == (BypassActor(5, "RepositoryRole", "always"),)
    assert [label.name for label in config.labels] == [
        "bug",
        "enhancement",
        "documentation",
        "dependencies",
        "security",
        "good first issue",
    ]


def test_empty_overlay_keeps_defaults():
    assert config_from_dict({}) == SetupConfig()


def test_overlay_replaces_only_given_keys():
    config = config_from_dict(
        {
            "merge": {"enable_rebase_merge": True},
            "ruleset": {
                "branch": "trunk",
                "require_signed_commits": True,
                "pull_request": {"required_approving_review_count": 2},
                "status_checks": {"contexts": ["build", "build"]},
            },
            "create_labels": False,
        }
    )
    assert config.merge.enable_rebase_merge is True
    assert config.merge.enable_squash_merge is True
    assert config.ruleset.branch == "trunk"
    assert config.ruleset.require_signed_commits is True
    assert config.ruleset.pull_request.required_approving_review_count == 2
    assert config.ruleset.pull_request.dismiss_stale_reviews_on_push is True
    assert config.ruleset.status_checks.contexts == ("build", "build")
    assert config.ruleset.status_checks.strict_required_status_checks_policy is True
    assert config.create_labels is False
    assert config.labels == DEFAULT_LABELS


def test_labels_are_replaced_and_normalized():
    config = config_from_dict(
        {"labels": [{"name": "triage", "description": "Needs triage", "color": "#FBCA04"}]}
    )
    assert len(config.labels) == 1
    assert config.labels[0].color == "fbca04"


def test_bypass_actors_can_be_emptied():
    config = config_from_dict({"ruleset": {"bypass_actors": []}})
    assert config.ruleset.bypass_actors == ()


@pytest.mark.parametrize(
    "data, fragment",
    [
        ({"ruleset": {"pull_request": {"required_approving_review_count": -1}}}, "must be >= 0"),
        ({"ruleset": {"pull_request": {"required_approving_review_count": True}}}, "expected an integer"),
        ({"merge": {"enable_squash_merge": "yes"}}, "merge.enable_squash_merge: expected a boolean"),
        ({"ruleset": {"status_checks": {"contexts": ["lint", ""]}}}, "contexts[1]"),
        ({"ruleset": {"branch": ""}}, "ruleset.branch"),
        ({"labels": [{"name": "x", "color": "zzz"}]}, "6 hexadecimal digits"),
        ({"labels": [{"name": "x", "color": "d73a4a\n"}]}, "labels[0].color: expected 6 hexadecimal digits"),
        ({"labels": [{"name": "x", "color": 123456}]}, "labels[0].color: expected a string"),
        ({"ruleset": {"bypass_actors": [{"actor_id": "5"}]}}, "actor_id: expected an integer"),
        ({"rulesets": {}}, "config.rulesets: unknown key"),
        ({"ruleset": {"require_everything": True}}, "ruleset.require_everything: unknown key"),
    ],
)
def test_invalid_values_are_reported(data, fragment):
    with pytest.raises(ConfigError) as excinfo:
        config_from_dict(data)
    assert any(fragment in error for error in excinfo.value.errors)


def test_all_errors_collected():
    with pytest.raises(ConfigError) as excinfo:
        config_from_dict({"merge": {"enable_auto_merge": 1}, "security": {"nope": True}})
    assert len(excinfo.value.errors) == 2


def test_load_config_from_file(tmp_path):
    path = tmp_path / "setup.json"
    path.write_text(json.dumps({"security": {"enable_secret_scanning": False}}), encoding="utf-8")
    config = load_config(path)
    assert config.security.enable_secret_scanning is False


def test_load_config_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="not valid JSON"):
        load_config(path)


def test_load_config_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Unable to read"):
        load_config(tmp_path / "missing.json")
