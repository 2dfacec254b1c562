"""
ForageSim Server  –  Flask + Server-Sent Events
===============================================

Endpoints:
  GET  /config/default  Default configuration as JSON
  GET  /methods         Available selection / mutation / crossover methods
  POST /start           Create a simulation from a JSON config (+ optional seed)
  GET  /world           Current world snapshot
  POST /step            Advance one tick
  POST /train           Advance to the end of the current generation
  POST /run             Keep training in the background (one SSE event per gen)
  POST /stop            Stop background training (202 while the worker finishes its generation)
  GET  /stream          SSE stream – browser subscribes here for live data
  GET  /status          Current sim state as JSON

Run:
  python server.py
  # → http://localhost:5000
"""

import threading
import queue
import json

import numpy as np
from flask import Flask, Response, request, jsonify

from config import Config, SERVER_HOST, SERVER_PORT
from genome import Crossover, Mutation
from selection import Selection
from simulation import Simulation


STOP_TIMEOUT = 5.0   # seconds /stop waits for the worker before answering


class _SimState:
    """Everything one server instance knows about its simulation."""

    def __init__(self):
        self.sim        = None
        self.rng        = None
        self.sim_lock   = threading.Lock()     # guards sim + rng
        self.thread     = None
        self.stop_event = threading.Event()
        self.stop_timeout = STOP_TIMEOUT
        self.run_id     = 0                    # tags every event of one /run
        self.queue      = queue.Queue(maxsize=200)
        self.status     = {"running": False, "generation": 0, "age": 0, "config": None}
        self.status_lock = threading.Lock()

    def update_status(self, **changes):
        with self.status_lock:
            self.status.update(changes)

    def get_status(self, key):
        with self.status_lock:
            return self.status[key]

    def worker_alive(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    def busy(self) -> bool:
        return self.worker_alive() or self.get_status("running")

    def stop_worker(self, timeout=None) -> bool:
        """
        Ask the worker to stop after its current generation and wait for it.
        Returns False if it is still running after `timeout`; the handle is
        then kept so a second worker cannot start alongside it.
        """
        self.stop_event.set()
        if self.worker_alive():
            self.thread.join(timeout=timeout)
        if self.worker_alive():
            return False
        self.thread = None
        return True


def _build_config(data: dict) -> Config:
    """Merge request JSON (minus non-config keys) with defaults."""
    data = {k: v for k, v in data.items() if k != "seed"}
    return Config.from_dict(data)


def _push(out_q: queue.Queue, payload: dict):
    # Non-blocking put; drop oldest frame if queue full
    if out_q.full():
        try:
            out_q.get_nowait()
        except queue.Empty:
            pass
    out_q.put(payload)


def _train_worker(state: _SimState, run_id: int, stop_evt: threading.Event,
                  out_q: queue.Queue):
    """Train generation after generation until stopped."""
    state.update_status(running=True)
    try:
        while not stop_evt.is_set():
            with state.sim_lock:
                stats = state.sim.train(state.rng)
                generation = state.sim.generation
                snapshot = state.sim.world()
            state.update_status(generation=generation, age=0)
            _push(out_q, {
                "type":       "generation",
                "run":        run_id,
                "generation": generation,
                "stats":      stats.as_dict(),
                "summary":    str(stats),
                "world":      snapshot,
            })
    finally:
        state.update_status(running=False)
        _push(out_q, {"type": "done", "run": run_id,
                      "generation": state.get_status("generation")})


# ──────────────────────────────────────────────────────────────────────────────

def create_app() -> Flask:
    app = Flask(__name__)
    state = _SimState()
    app.extensions["foragesim"] = state

    # CORS: any origin may call the API from a browser
    @app.after_request
    def add_cors(response):
        response.headers["Access-Control-Allow-Origin"]  = "*"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        return response

    @app.route("/", methods=["OPTIONS"])
    @app.route("/<path:p>", methods=["OPTIONS"])
    def preflight(p=""):
        return Response(status=200)

    def _conflict(message: str):
        return jsonify({"error": message}), 409

    def _no_sim():
        return _conflict("no simulation; POST /start first")

    # ─── Configuration ────────────────────────────────────────────────────────

    @app.route("/config/default", methods=["GET"])
    def default_config():
        return jsonify(Config().to_dict())

    @app.route("/methods", methods=["GET"])
    def methods():
        return jsonify({
            "selection": Selection.names(),
            "mutation":  Mutation.names(),
            "crossover": Crossover.names(),
        })

    @app.route("/start", methods=["POST"])
    def start():
        data = request.get_json(force=True, silent=True)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return jsonify({"error": "request body must be a JSON object"}), 400
        try:
            config = _build_config(data)
            rng = np.random.default_rng(data.get("seed"))
        except (TypeError, ValueError) as exc:
            return jsonify({"error": str(exc)}), 400

        # Stop any running training; the sim must not change under it
        state.stop_worker()
        state.stop_event = threading.Event()
        state.queue      = queue.Queue(maxsize=200)

        with state.sim_lock:
            if state.sim is not None:
                state.sim.close()
            state.sim = Simulation.random(rng, config)
            state.rng = rng
        state.update_status(running=False, generation=0, age=0,
                            config=config.to_dict())
        return jsonify({"status": "started", "config": config.to_dict()})

    # ─── Stepping ─────────────────────────────────────────────────────────────

    @app.route("/world", methods=["GET"])
    def world():
        if state.sim is None:
            return _no_sim()
        with state.sim_lock:
            return jsonify(state.sim.world())

    @app.route("/step", methods=["POST"])
    def step():
        if state.sim is None:
            return _no_sim()
        if state.busy():
            return _conflict("training is running; POST /stop first")
        with state.sim_lock:
            stats = state.sim.step(state.rng)
            snapshot = state.sim.world()
            generation, age = state.sim.generation, state.sim.age
        state.update_status(generation=generation, age=age)
        return jsonify({
            "stats": stats.as_dict() if stats is not None else None,
            "world": snapshot,
        })

    @app.route("/train", methods=["POST"])
    def train():
        if state.sim is None:
            return _no_sim()
        if state.busy():
            return _conflict("training is running; POST /stop first")
        with state.sim_lock:
            stats = state.sim.train(state.rng)
            generation = state.sim.generation
        state.update_status(generation=generation, age=0)
        return jsonify({
            "generation": generation,
            "stats":      stats.as_dict(),
            "summary":    str(stats),
        })

    # ─── Background training ──────────────────────────────────────────────────

    @app.route("/run", methods=["POST"])
    def run():
        if state.sim is None:
            return _no_sim()
        if state.worker_alive():
            return _conflict("training is already running")
        state.run_id    += 1
        state.stop_event = threading.Event()
        state.thread = threading.Thread(
            target=_train_worker,
            args=(state, state.run_id, state.stop_event, state.queue),
            daemon=True,
        )
        state.thread.start()
        return jsonify({"status": "running"})

    @app.route("/stop", methods=["POST"])
    def stop():
        if not state.stop_worker(state.stop_timeout):
            return jsonify({"status": "stopping"}), 202
        return jsonify({"status": "stopped"})

    @app.route("/status", methods=["GET"])
    def status():
        with state.status_lock:
            return jsonify(dict(state.status))

    @app.route("/stream", methods=["GET"])
    def stream():
        """SSE endpoint – browser subscribes and receives each generation as an event."""
        out_q = state.queue

        def event_gen():
            # Send a hello so the browser knows it's connected
            yield "data: {\"type\": \"connected\"}\n\n"

            while True:
                try:
                    payload = out_q.get(timeout=1)
                    if payload.get("run", state.run_id) != state.run_id:
                        continue    # left over from an earlier run
                    yield f"data: {json.dumps(payload)}\n\n"
                    if payload.get("type") == "done":
                        break
                except queue.Empty:
                    # Keep-alive ping
                    yield "data: {\"type\": \"ping\"}\n\n"

        return Response(
            event_gen(),
            mimetype="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "X-Accel-Buffering": "no",    # disable nginx buffering if behind proxy
            },
        )

    return app


app = create_app()


# ──────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    print("=" * 50)
    print(f"  ForageSim Server  →  http://localhost:{SERVER_PORT}")
    print(f"  SSE stream        →  http://localhost:{SERVER_PORT}/stream")
    print("=" * 50)
    app.run(host=SERVER_HOST, port=SERVER_PORT, threaded=True, debug=False)
