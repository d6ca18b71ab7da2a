"""Tests for opwkin.kinematics.inverse."""

import numpy as np
import pytest

from opwkin.kinematics.forward import forward
from opwkin.kinematics.inverse import (
    BRANCH_ORDER,
    Branch,
    Elbow,
    Shoulder,
    inverse_raw,
)
from opwkin.kinematics.params import GeometricParameters
from opwkin.kinematics.pose import Pose
from opwkin.kinematics.robot_params import abb_irb2400, kuka_kr6_r700_sixx
from opwkin.kinematics.transforms import wrap_angle

_TOL = 1e-6
_FRONT_UP = Branch(Shoulder.FRONT, Elbow.UP, False)


def _generic_params(**overrides) -> GeometricParameters:
    """An arm with every offset, lateral shift and sign flip in use."""
    base = dict(
        a1=0.15,
        a2=-0.1,
        b=0.05,
        c1=0.5,
        c2=0.6,
        c3=0.7,
        c4=0.1,
        offsets=(0.1, -0.2, 0.3, 0.0, 0.05, 0.0),
        sign_corrections=(1, -1, 1, -1, 1, 1),
    )
    base.update(overrides)
    return GeometricParameters(**base)


def _assert_all_reach(solutions, pose, params):
    for sol in solutions:
        actual = forward(sol.joints, params)
        np.testing.assert_allclose(actual.rotation, pose.rotation, atol=_TOL)
        np.testing.assert_allclose(actual.translation, pose.translation, atol=_TOL)


def _contains(solutions, q) -> bool:
    return any(np.allclose(wrap_angle(s.joints - q), 0.0, atol=_TOL) for s in solutions)


def _by_branch(solutions, branch):
    matches = [s for s in solutions if s.branch == branch]
    assert len(matches) == 1
    return matches[0]


class TestBranch:
    def test_enumeration_order(self):
        assert [b.index for b in BRANCH_ORDER] == list(range(8))
        assert BRANCH_ORDER[0] == Branch(Shoulder.FRONT, Elbow.UP, False)
        assert BRANCH_ORDER[1] == Branch(Shoulder.FRONT, Elbow.UP, True)
        assert BRANCH_ORDER[2] == Branch(Shoulder.FRONT, Elbow.DOWN, False)
        assert BRANCH_ORDER[4] == Branch(Shoulder.BACK, Elbow.UP, False)
        assert BRANCH_ORDER[7] == Branch(Shoulder.BACK, Elbow.DOWN, True)

    def test_sorting_matches_index(self):
        assert sorted(reversed(BRANCH_ORDER)) == list(BRANCH_ORDER)

    def test_invalid_index(self):
        with pytest.raises(ValueError, match="Branch index"):
            Branch.from_index(8)


class TestInverseKuka:
    joints = np.array([0.0, 0.1, 0.2, 0.3, 0.4, 0.5])
    # Bent elbow keeps the wrist center close enough for the back branches.
    folded = np.array([0.2, -0.5, 1.2, 0.3, 0.6, -0.4])

    def test_eight_solutions_in_branch_order(self):
        params = kuka_kr6_r700_sixx()
        raw = inverse_raw(forward(self.folded, params), params)
        assert len(raw) == 8
        assert [s.branch for s in raw] == list(BRANCH_ORDER)
        assert all(s.valid for s in raw)

    def test_all_solutions_reach_pose(self):
        params = kuka_kr6_r700_sixx()
        pose = forward(self.joints, params)
        _assert_all_reach(inverse_raw(pose, params), pose, params)

    def test_input_configuration_is_front_elbow_up(self):
        params = kuka_kr6_r700_sixx()
        raw = inverse_raw(forward(self.joints, params), params)
        np.testing.assert_allclose(_by_branch(raw, _FRONT_UP).joints, self.joints, atol=_TOL)

    def test_wrist_flip_relation(self):
        params = kuka_kr6_r700_sixx()
        raw = inverse_raw(forward(self.folded, params), params)
        plain = params.to_model(raw[0].joints)
        flipped = params.to_model(raw[1].joints)
        np.testing.assert_allclose(flipped[:3], plain[:3], atol=1e-12)
        expected_shift = np.array([np.pi, -2 * plain[4], -np.pi])
        np.testing.assert_allclose(
            wrap_angle(flipped[3:] - plain[3:] - expected_shift), 0.0, atol=1e-12
        )

    def test_back_branch_turns_base_half_a_revolution(self):
        params = kuka_kr6_r700_sixx()
        raw = inverse_raw(forward(self.folded, params), params)
        front = _by_branch(raw, _FRONT_UP).joints[0]
        back = _by_branch(raw, Branch(Shoulder.BACK, Elbow.UP, False)).joints[0]
        np.testing.assert_allclose(abs(wrap_angle(back - front)), np.pi, atol=1e-9)


class TestRoundTrip:
    @pytest.mark.parametrize(
        "params_fn",
        [kuka_kr6_r700_sixx, abb_irb2400, _generic_params],
    )
    def test_random_configurations(self, params_fn):
        params = params_fn()
        rng = np.random.default_rng(42)
        for _ in range(20):
            q = rng.uniform(-2.5, 2.5, size=6)
            pose = forward(q, params)
            raw = inverse_raw(pose, params)
            assert raw, f"No solution for reachable configuration {q}"
            _assert_all_reach(raw, pose, params)
            assert _contains(raw, q), f"Configuration {q} missing from its own solutions"

    def test_parallelogram(self):
        params = _generic_params(has_parallelogram=True)
        rng = np.random.default_rng(3)
        for _ in range(10):
            q = rng.uniform(-1.5, 1.5, size=6)
            pose = forward(q, params)
            raw = inverse_raw(pose, params)
            _assert_all_reach(raw, pose, params)
            assert _contains(raw, q)

    def test_parallelogram_reports_elbow_relative_to_shoulder(self):
        plain = _generic_params(sign_corrections=(1,) * 6, offsets=(0.0,) * 6)
        coupled = _generic_params(
            sign_corrections=(1,) * 6, offsets=(0.0,) * 6, has_parallelogram=True
        )
        pose = forward(np.array([0.2, 0.3, 0.4, 0.1, 0.6, -0.2]), plain)
        a = _by_branch(inverse_raw(pose, plain), _FRONT_UP).joints
        b = _by_branch(inverse_raw(pose, coupled), _FRONT_UP).joints
        np.testing.assert_allclose(b[2], a[2] - a[1], atol=1e-12)


class TestSingularWrist:
    joints = np.array([0.1, -0.5, 1.2, 0.4, 0.0, 0.6])

    def test_seed_keeps_wrist_roll(self):
        params = kuka_kr6_r700_sixx()
        pose = forward(self.joints, params)
        raw = inverse_raw(pose, params, seed=self.joints)
        np.testing.assert_allclose(_by_branch(raw, _FRONT_UP).joints, self.joints, atol=_TOL)

    def test_flipped_entry_is_same_configuration(self):
        """The flipped twin turns joint 4 half a revolution away from the seed."""
        params = kuka_kr6_r700_sixx()
        pose = forward(self.joints, params)
        raw = inverse_raw(pose, params, seed=self.joints)
        flipped = _by_branch(raw, Branch(Shoulder.FRONT, Elbow.UP, True)).joints
        np.testing.assert_allclose(flipped[:3], self.joints[:3], atol=_TOL)
        expected_q4 = self.joints[3] - np.pi
        np.testing.assert_allclose(wrap_angle(flipped[3] - expected_q4), 0.0, atol=_TOL)
        np.testing.assert_allclose(flipped[4], 0.0, atol=1e-12)
        expected_q6 = self.joints[5] + np.pi
        np.testing.assert_allclose(wrap_angle(flipped[5] - expected_q6), 0.0, atol=_TOL)
        assert forward(flipped, params).is_close(pose, atol=_TOL)

    def test_without_seed_wrist_roll_is_zero(self):
        params = kuka_kr6_r700_sixx()
        pose = forward(self.joints, params)
        sol = _by_branch(inverse_raw(pose, params), _FRONT_UP).joints
        np.testing.assert_allclose(sol[3], 0.0, atol=1e-12)
        np.testing.assert_allclose(sol[4], 0.0, atol=1e-12)
        # The whole wrist roll moves to joint 6.
        np.testing.assert_allclose(wrap_angle(sol[5] - 1.0), 0.0, atol=_TOL)

    def test_seed_with_other_wrist_roll(self):
        params = kuka_kr6_r700_sixx()
        pose = forward(self.joints, params)
        seed = np.array([0.0, 0.0, 0.0, -0.7, 0.0, 0.0])
        sol = _by_branch(inverse_raw(pose, params, seed=seed), _FRONT_UP).joints
        np.testing.assert_allclose(sol[3], -0.7, atol=1e-12)
        np.testing.assert_allclose(wrap_angle(sol[5] - 1.7), 0.0, atol=_TOL)

    def test_repeatable(self):
        params = kuka_kr6_r700_sixx()
        pose = forward(self.joints, params)
        first = inverse_raw(pose, params)
        second = inverse_raw(pose, params)
        assert len(first) == len(second) == 8
        for a, b in zip(first, second):
            assert a.branch == b.branch
            np.testing.assert_array_equal(a.joints, b.joints)

    def test_singular_solutions_reach_pose(self):
        params = kuka_kr6_r700_sixx()
        pose = forward(self.joints, params)
        _assert_all_reach(inverse_raw(pose, params, seed=self.joints), pose, params)

    def test_wrist_pitch_at_half_turn(self):
        params = kuka_kr6_r700_sixx()
        joints = np.array([0.1, -0.5, 1.2, 0.4, np.pi, 0.6])
        pose = forward(joints, params)
        raw = inverse_raw(pose, params, seed=joints)
        np.testing.assert_allclose(_by_branch(raw, _FRONT_UP).joints, joints, atol=_TOL)
        _assert_all_reach(raw, pose, params)


class TestReachability:
    def test_far_target_unreachable(self):
        params = kuka_kr6_r700_sixx()
        pose = Pose(rotation=np.eye(3), translation=np.array([5.0, 5.0, 5.0]))
        assert inverse_raw(pose, params) == ()

    def test_stretched_arm_has_no_nan(self):
        """At the reach boundary the law-of-cosines argument is clamped."""
        params = kuka_kr6_r700_sixx()
        # Forearm aligned with the upper arm: q3 cancels the elbow offset angle.
        q3_straight = -np.arctan2(params.a2, params.c3)
        joints = np.array([0.0, -0.3, q3_straight, 0.0, 0.5, 0.0])
        pose = forward(joints, params)
        raw = inverse_raw(pose, params)
        assert raw
        for sol in raw:
            assert np.all(np.isfinite(sol.joints))
        front = [s for s in raw if s.branch.shoulder is Shoulder.FRONT]
        assert len(front) == 4
        _assert_all_reach(front, pose, params)

    def test_just_beyond_reach(self):
        params = kuka_kr6_r700_sixx()
        q3_straight = -np.arctan2(params.a2, params.c3)
        joints = np.array([0.0, -0.3, q3_straight, 0.0, 0.0, 0.0])
        pose = forward(joints, params)
        direction = pose.rotation[:, 2]
        beyond = Pose(rotation=pose.rotation, translation=pose.translation + 1e-3 * direction)
        assert all(s.branch.shoulder is Shoulder.BACK for s in inverse_raw(beyond, params))

    def test_wrist_center_inside_lateral_offset(self):
        params = _generic_params(b=0.1)
        pose = Pose(rotation=np.eye(3), translation=np.array([0.0, 0.0, 0.5 + params.c4]))
        assert inverse_raw(pose, params) == ()
