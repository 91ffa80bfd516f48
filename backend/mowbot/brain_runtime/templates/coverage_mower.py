"""
Coverage Mower - Template for Advanced Brains

Plans a back-and-forth path over the mowing zone once in init(), then
steers toward each waypoint in turn.

Learning Goals:
- nav.get_mowing_zone() and nav.plan_coverage()
- Heading error and proportional steering
- Debug overlays
"""

import math

TOOL_WIDTH = 1.0
ARRIVE_RADIUS = 0.8
SPEED = 2.5
STEER_GAIN = 1.5

memory = {"path": [], "index": 0}


def wrap_angle(angle):
    while angle > math.pi:
        angle = angle - 2 * math.pi
    while angle < -math.pi:
        angle = angle + 2 * math.pi
    return angle


def init(api):
    zone = api.nav.get_mowing_zone()
    memory["path"] = api.nav.plan_coverage(zone, TOOL_WIDTH)
    memory["index"] = 0
    api.console.log("Planned " + str(len(memory["path"])) + " waypoints")


def step(api, dt):
    path = memory["path"]
    if memory["index"] >= len(path):
        api.robot.stop()
        api.telemetry.watch("task", "DONE")
        return

    target = path[memory["index"]]
    if api.nav.distance_to(target.x, target.z) < ARRIVE_RADIUS:
        memory["index"] = memory["index"] + 1
        return

    error = wrap_angle(api.nav.heading_to(target.x, target.z) - api.robot.pose().heading)
    api.robot.set_steer(error * STEER_GAIN)
    api.robot.set_speed(SPEED if abs(error) < 0.5 else SPEED * 0.4)

    api.telemetry.watch("task", "MOWING")
    api.telemetry.watch("waypoint", memory["index"])
    api.debug.path(path[memory["index"]:memory["index"] + 10])
