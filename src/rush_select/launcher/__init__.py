"""Selection-to-execution pipeline for workspace scripts.

One cycle turns the operator's picks into a plan, runs the pre-scripts one
after another, runs the optional workspace build, and finally runs the chosen
project scripts side by side. Any failure before the main phase stops the
whole launcher; failures among main scripts only end the cycle.
"""
