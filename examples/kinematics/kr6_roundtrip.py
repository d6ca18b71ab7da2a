#!/usr/bin/env python3
"""Forward and inverse kinematics round trip on the KUKA KR 6 R700 sixx.

Usage:
    python examples/kinematics/kr6_roundtrip.py
"""

from logging import DEBUG, basicConfig

import numpy as np

from opwkin.kinematics import OPWSolver, kuka_kr6_r700_sixx, kuka_kr6_r700_sixx_limits

basicConfig(level=DEBUG)


def main() -> None:
    solver = OPWSolver(kuka_kr6_r700_sixx(), kuka_kr6_r700_sixx_limits())
    joints = np.array([0.0, 0.1, 0.2, 0.3, 0.4, 0.5])

    pose = solver.forward(joints)
    print("Flange position [m]:", np.round(pose.translation, 4))
    print("Flange rotation:\n", np.round(pose.rotation, 4))

    result = solver.solve_all(pose, seed=joints)
    if not result.success:
        print(f"No solution: {result.error}")
        return

    print(f"\n{len(result.solutions)} solutions within limits:")
    for sol in result.solutions:
        b = sol.branch
        label = f"{b.shoulder.name:5s} {b.elbow.name:4s} flip={int(b.wrist_flip)}"
        print(f"  [{b.index}] {label}  {np.round(np.rad2deg(sol.joints), 2)}")

    best = solver.solve(pose, seed=joints)
    print("\nClosest to seed:", np.round(best.solution, 6))


if __name__ == "__main__":
    main()
