"""
Hello Brain - Template for Beginners

Drives a slow circle and reports where it is.

Learning Goals:
- The init(api) / step(api, dt) contract
- Reading the pose
- Console output and watches
"""


def init(api):
    api.console.log("Hello from the brain!")


def step(api, dt):
    api.robot.set_speed(1.5)
    api.robot.set_steer(0.3)

    pose = api.robot.pose()
    api.telemetry.watch("heading", round(pose.heading, 2))
    api.telemetry.log("speed", api.robot.velocity().speed)
