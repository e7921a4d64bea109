import pytest

from getdoc.core.errors import ConfigurationError, ExitCode
from getdoc.core.planner import FeatureSetPlanner


@pytest.fixture
def planner():
    return FeatureSetPlanner()


def test_comprehensive_plan_order(planner):
    plan = planner.plan(["a", "b"])

    assert [c.name for c in plan] == [
        "default",
        "no-default",
        "all-features",
        "feature a + no-default",
        "feature b + no-default",
    ]
    assert plan[0].check_args == ()
    assert plan[3].check_args == ("--no-default-features", "--features", "a")


def test_comprehensive_plan_size(planner):
    declared = ["x", "y", "z"]
    assert len(planner.plan(declared)) == 2 + 1 + len(declared)


def test_comprehensive_without_features(planner):
    plan = planner.plan([])
    assert [c.name for c in plan] == ["default", "no-default", "all-features"]


def test_default_enabled_features_are_not_checked_alone(planner):
    plan = planner.plan(["std", "extra"], default_features={"std"})
    assert [c.name for c in plan][3:] == ["feature extra + no-default"]


def test_declared_set_is_planned_in_sorted_order(planner):
    plan = planner.plan({"zeta", "alpha"})
    assert [c.name for c in plan][3:] == ["feature alpha + no-default", "feature zeta + no-default"]


def test_targeted_plan(planner):
    plan = planner.plan(["a", "b"], focus=["b"])

    assert [c.name for c in plan] == ["feature b + no-default", "feature b + default", "default"]
    assert plan[1].check_args == ("--features", "b")


def test_targeted_plan_dedupes_repeated_focus(planner):
    plan = planner.plan(["a", "b"], focus=["a", "a", "b"])
    assert [c.name for c in plan] == [
        "feature a + no-default",
        "feature a + default",
        "feature b + no-default",
        "feature b + default",
        "default",
    ]


def test_flag_sets_are_unique(planner):
    plan = planner.plan(["a", "b", "c"])
    keys = [c.flag_key for c in plan]
    assert len(keys) == len(set(keys))


def test_empty_focus_is_comprehensive(planner):
    assert [c.name for c in planner.plan(["a"], focus=[])] == [c.name for c in planner.plan(["a"])]
    assert not planner.mode_for([]).targeted


def test_unknown_focus_feature(planner):
    with pytest.raises(ConfigurationError) as exc_info:
        planner.plan({"x"}, focus={"y"})

    assert exc_info.value.context["unknown"] == ["y"]
    assert exc_info.value.exit_code == ExitCode.CONFIG_ERROR
    assert "y" in exc_info.value.message


def test_mode_descriptor(planner):
    assert planner.mode_for(None).describe() == "Comprehensive Mode"
    assert planner.mode_for(["a", "b"]).describe() == "Targeted Mode for Features: `a, b`"
