"""Ways of wiring engines together: batch runs, engine threads,
amplifier chains / feedback rings, and controller loops."""

from .workers import EngineThread, spawn, join_all
from .batch import BatchResult, run_batch, find_noun_verb, program_image
from .ring import run_chain, run_feedback_ring, max_signal
from .controller import Controller, HullPaintingRobot, ArcadeCabinet
