"""
Obstacle Avoider - Template for Intermediate Brains

Wanders the field at cruising speed. Turns away when something is close
in front, and reverses out when it finds itself in water.

Learning Goals:
- Front distance sensor
- Ground classification
- Keeping state between steps
"""

CRUISE_SPEED = 3.0
SLOW_SPEED = 1.0
TURN = 0.8

memory = {"reversing": 0.0}


def step(api, dt):
    distance = api.sensors.front_distance()
    ground = api.sensors.ground_type()

    api.telemetry.log("front_distance", distance)
    api.telemetry.watch("ground", ground)

    # Back out for a second after touching water
    if ground == "WATER":
        memory["reversing"] = 1.0
    if memory["reversing"] > 0:
        memory["reversing"] = memory["reversing"] - dt
        api.robot.set_speed(-1.5)
        api.robot.set_steer(TURN)
        return

    if distance < 3.0:
        api.robot.set_speed(SLOW_SPEED)
        api.robot.set_steer(TURN)
    else:
        api.robot.set_speed(CRUISE_SPEED)
        api.robot.set_steer(0.0)
