"""Magnetometer access and trace playback."""

import json
import subprocess
import threading
from typing import Callable, Iterable, Optional

from .config import CONFIG
from .exceptions import SensorUnavailable
from .models import HeadingSample


class SensorSubscription:
    """Handle for a running magnetometer listener.

    Samples are delivered from a single polling thread, so callbacks see them
    in the order they were read. After remove() returns no callback runs.
    """

    def __init__(self, sensor: "Magnetometer", callback: Callable[[HeadingSample], None],
                 on_error: Optional[Callable[[Exception], None]] = None):
        self.sensor = sensor
        self.callback = callback
        self.on_error = on_error
        self._stopped = threading.Event()
        self._lock = threading.RLock()
        self._thread = threading.Thread(target=self._run, daemon=True,
                                        name="magnetometer-listener")

    @property
    def active(self) -> bool:
        return not self._stopped.is_set() and self._thread.is_alive()

    def start(self):
        self._thread.start()

    def remove(self):
        """Stop delivering samples and release the sensor"""
        with self._lock:
            self._stopped.set()
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join()

    def _deliver(self, fn: Callable, arg):
        # Holding the lock while calling out makes remove() wait for an
        # in-flight callback
        with self._lock:
            if self._stopped.is_set():
                return
            fn(arg)

    def _run(self):
        try:
            while not self._stopped.is_set():
                if self.sensor.is_finished():
                    break
                sample = self.sensor.read_sample()
                if sample is not None:
                    self._deliver(self.callback, sample)
                self._stopped.wait(self.sensor.update_interval_ms / 1000)
        except SensorUnavailable as e:
            self._report(e)
        except Exception as e:
            # Any other failure also ends the stream
            error = SensorUnavailable(f"Compass read failed: {e}")
            error.__cause__ = e
            self._report(error)
        finally:
            self._stopped.set()

    def _report(self, error: SensorUnavailable):
        if self.on_error:
            self._deliver(self.on_error, error)


class Magnetometer:
    """Base magnetometer source, polled at a configurable interval"""

    def __init__(self, update_interval_ms: Optional[int] = None):
        self.update_interval_ms = (update_interval_ms if update_interval_ms is not None
                                   else CONFIG["magnetometer_update_interval_ms"])

    def is_available(self) -> bool:
        return True

    def set_update_interval(self, interval_ms: int):
        if interval_ms < 0:
            raise ValueError("update interval must not be negative")
        self.update_interval_ms = interval_ms

    def read_sample(self) -> Optional[HeadingSample]:
        """Return the next reading, or None when none is ready yet"""
        raise NotImplementedError

    def is_finished(self) -> bool:
        return False

    def add_listener(self, callback: Callable[[HeadingSample], None],
                     on_error: Optional[Callable[[Exception], None]] = None) -> SensorSubscription:
        subscription = SensorSubscription(self, callback, on_error)
        subscription.start()
        return subscription


class TermuxMagnetometer(Magnetometer):
    """Magnetometer access via Termux API"""

    def __init__(self, sensor_name: Optional[str] = None, timeout: float = 5,
                 update_interval_ms: Optional[int] = None):
        super().__init__(update_interval_ms)
        self.sensor_name = sensor_name or CONFIG["magnetometer_sensor"]
        self.timeout = timeout

    def is_available(self) -> bool:
        try:
            return self.read_sample() is not None
        except SensorUnavailable:
            return False

    def read_sample(self) -> Optional[HeadingSample]:
        """Take one reading using termux-sensor"""
        try:
            result = subprocess.run(
                ["termux-sensor", "-s", self.sensor_name, "-n", "1"],
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except FileNotFoundError:
            raise SensorUnavailable("termux-sensor not found")
        except subprocess.TimeoutExpired:
            return None

        if result.returncode != 0:
            error_msg = result.stderr.strip() if result.stderr else "unknown error"
            raise SensorUnavailable(f"termux-sensor failed: {error_msg}")

        return self.parse_output(result.stdout)

    @staticmethod
    def parse_output(output: str) -> Optional[HeadingSample]:
        """Parse termux-sensor JSON: {"<sensor name>": {"values": [x, y, z]}}"""
        if not output or not output.strip():
            return None
        try:
            data = json.loads(output)
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict):
            return None
        for reading in data.values():
            values = reading.get("values") if isinstance(reading, dict) else None
            if isinstance(values, list) and len(values) >= 2:
                try:
                    return HeadingSample(x=float(values[0]), y=float(values[1]))
                except (TypeError, ValueError):
                    return None
        return None


class MagnetometerPlayback(Magnetometer):
    """Plays back magnetometer samples from a trace"""

    def __init__(self, samples: Iterable, update_interval_ms: Optional[int] = None):
        super().__init__(update_interval_ms)
        self.samples: list[HeadingSample] = [
            s if isinstance(s, HeadingSample) else HeadingSample(x=s["x"], y=s["y"])
            for s in samples
        ]
        self.index = 0

    @classmethod
    def from_file(cls, playback_path: str, update_interval_ms: Optional[int] = None) -> "MagnetometerPlayback":
        with open(playback_path) as f:
            data = json.load(f)
        playback = cls(data["samples"], update_interval_ms)
        print(f"Loaded magnetometer trace from {playback_path} ({len(playback.samples)} samples)")
        return playback

    def is_available(self) -> bool:
        return bool(self.samples)

    def read_sample(self) -> Optional[HeadingSample]:
        if self.index >= len(self.samples):
            return None
        sample = self.samples[self.index]
        self.index += 1
        return sample

    def is_finished(self) -> bool:
        return self.index >= len(self.samples)
