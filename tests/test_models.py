"""领域模型单元测试

测试内容：
1. EventConfig 默认值、概率截断、非法输入
2. EventConfigBuilder 链式构建
3. ActivationEvent / EligibilityResult
"""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError
from trackkit.exceptions import InvalidConfigError, TrackKitError
from trackkit.models import (
    ActivationEvent,
    ActivationRecord,
    EligibilityResult,
    EventConfig,
    EventConfigBuilder,
    IneligibleReason,
)


class TestEventConfig:
    """EventConfig 构造与校验"""

    def test_defaults(self):
        """只传 id 时的默认值"""
        config = EventConfig(id="welcome")
        assert config.min_interval == 0
        assert config.expiration_date is None
        assert config.max_activation_count is None
        assert config.priority == 0
        assert config.probability == 1.0
        assert config.metadata is None
        assert config.dependencies == ()

    def test_probability_above_one_clamped(self):
        assert EventConfig(id="e", probability=2.4).probability == 1.0

    def test_probability_below_zero_clamped(self):
        assert EventConfig(id="e", probability=-12).probability == 0.0

    def test_probability_in_range_kept(self):
        assert EventConfig(id="e", probability=0.9).probability == 0.9

    def test_probability_nan_rejected(self):
        with pytest.raises(InvalidConfigError):
            EventConfig(id="e", probability=float("nan"))

    def test_empty_id_rejected(self):
        """空 id 抛出类型化错误而不是 ValidationError"""
        with pytest.raises(InvalidConfigError):
            EventConfig(id="")

    def test_blank_id_rejected(self):
        with pytest.raises(InvalidConfigError):
            EventConfig(id="   ")

    def test_invalid_config_is_trackkit_error(self):
        with pytest.raises(TrackKitError):
            EventConfig(id="")

    def test_negative_min_interval_rejected(self):
        with pytest.raises(InvalidConfigError):
            EventConfig(id="e", min_interval=-1)

    def test_negative_max_activation_count_rejected(self):
        with pytest.raises(InvalidConfigError):
            EventConfig(id="e", max_activation_count=-1)

    def test_zero_max_activation_count_allowed(self):
        assert EventConfig(id="e", max_activation_count=0).max_activation_count == 0

    def test_dependencies_list_frozen_to_tuple(self):
        config = EventConfig(id="e", dependencies=["a", "b"])
        assert config.dependencies == ("a", "b")

    def test_naive_expiration_read_as_utc(self):
        config = EventConfig(id="e", expiration_date=datetime(2026, 5, 1, 8, 0))
        assert config.expiration_date == datetime(2026, 5, 1, 8, 0, tzinfo=UTC)

    def test_immutable(self):
        """构造后不可修改"""
        config = EventConfig(id="e")
        with pytest.raises(ValidationError):
            config.priority = 5

    def test_wrong_type_rejected(self):
        with pytest.raises(ValidationError):
            EventConfig(id="e", priority="high")


class TestEventConfigBuilder:
    """EventConfigBuilder 链式构建"""

    def test_builds_full_config(self):
        expiration = datetime.now(UTC) + timedelta(days=1)
        config = (
            EventConfigBuilder()
            .set_id("rate_app_prompt")
            .set_min_interval(3600)
            .set_expiration_date(expiration)
            .set_max_activation_count(5)
            .set_priority(10)
            .set_probability(0.9)
            .set_metadata({"key": "value"})
            .set_dependencies(["onboarding_done"])
            .build()
        )
        assert config.id == "rate_app_prompt"
        assert config.min_interval == 3600
        assert config.expiration_date == expiration
        assert config.max_activation_count == 5
        assert config.priority == 10
        assert config.probability == 0.9
        assert config.metadata == {"key": "value"}
        assert config.dependencies == ("onboarding_done",)

    def test_builder_clamps_probability(self):
        high = EventConfigBuilder().set_id("e").set_probability(2.4).build()
        low = EventConfigBuilder().set_id("e").set_probability(-12).build()
        assert high.probability == 1.0
        assert low.probability == 0.0

    def test_build_without_id_raises(self):
        with pytest.raises(InvalidConfigError):
            EventConfigBuilder().set_priority(3).build()

    def test_builder_dependencies_copied(self):
        """构建后修改原列表不影响配置"""
        deps = ["a"]
        builder = EventConfigBuilder().set_id("e").set_dependencies(deps)
        deps.append("b")
        assert builder.build().dependencies == ("a",)


class TestActivationModels:
    """激活相关模型"""

    def test_activation_event_has_ulid(self):
        event = ActivationEvent(
            event_id="e",
            activated_at=datetime.now(UTC),
            activation_count=1,
        )
        assert len(event.activation_id) == 26

    def test_activation_ids_unique(self):
        now = datetime.now(UTC)
        first = ActivationEvent(event_id="e", activated_at=now, activation_count=1)
        second = ActivationEvent(event_id="e", activated_at=now, activation_count=2)
        assert first.activation_id != second.activation_id

    def test_activation_record_defaults(self):
        record = ActivationRecord(event_id="e")
        assert record.last_activated_at is None
        assert record.activation_count == 0

    def test_eligibility_result_reason(self):
        result = EligibilityResult(
            event_id="e",
            eligible=False,
            reason=IneligibleReason.DEPENDENCY_UNMET,
            blocking_dependency="a",
        )
        assert result.reason == "DEPENDENCY_UNMET"
        assert result.blocking_dependency == "a"
