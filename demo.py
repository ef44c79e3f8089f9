"""
Demo Application for the Focus Dashboard Engine.
Runs one recording session against simulated telemetry and prints the
live attentiveness readings and the final summary.
"""

import argparse
import asyncio
import json

import numpy as np

import config
from camera import CameraCapture
from engine import FocusDashboardEngine
from telemetry import TelemetryFeed


class SimulatedWebcam:
    """Stand-in webcam that always grants access."""

    def __init__(self, feed: TelemetryFeed):
        self.feed = feed

    async def acquire(self) -> bool:
        await asyncio.sleep(0.1)
        self.feed.set_camera_state(ready=True, facing_camera=True)
        return True

    def release(self):
        self.feed.set_camera_state(ready=False)


class SimulatedTelemetrySource:
    """
    Random-walk telemetry publisher.
    Plays the part of the perception collaborator for the demo.
    """

    def __init__(self, feed: TelemetryFeed, seed: int = None, rate: float = 0.25):
        self.feed = feed
        self.rate = rate
        self.rng = np.random.default_rng(seed)
        self.attention = 0.7
        self.posture = 0.7
        self.distracted_seconds = 0.0

    async def run(self):
        while True:
            self.attention = float(np.clip(self.attention + self.rng.normal(0, 0.08), 0, 1))
            self.posture = float(np.clip(self.posture + self.rng.normal(0, 0.05), 0, 1))
            if self.attention < config.DISTRACTED_THRESHOLD:
                self.distracted_seconds += self.rate

            self.feed.update(
                attention_score=self.attention,
                posture=self.posture,
                time_distracted=int(self.distracted_seconds)
            )

            # Occasionally look away from the camera
            if self.rng.random() < 0.05:
                facing = not self.feed.get_camera_state().facing_camera
                self.feed.set_camera_state(facing_camera=facing)
                print(f"  [camera] facing: {'YES' if facing else 'NO'}")

            await asyncio.sleep(self.rate)


class FocusDashboardDemo:
    """
    Demo application with terminal output.
    Shows attentiveness readings, notices and the session report.
    """

    def __init__(self, duration: float, use_camera: bool, seed: int = None):
        """Initialize the demo application."""
        self.duration = duration
        self.feed = TelemetryFeed()
        webcam = CameraCapture(feed=self.feed) if use_camera else SimulatedWebcam(self.feed)
        self.engine = FocusDashboardEngine(
            webcam=webcam,
            feed=self.feed,
            transcript_provider=lambda: "This is a simulated transcription of the session."
        )
        self.source = SimulatedTelemetrySource(self.feed, seed=seed)

        self.engine.set_on_notice_callback(self._print_notice)
        self.engine.set_on_reading_callback(self._print_reading)

    async def run(self):
        """Run the demo application."""
        print("\n" + "="*60)
        print("Focus Dashboard Engine - Demo")
        print("="*60 + "\n")

        async with self.engine:
            if not await self.engine.request_consent():
                print("Error: Could not access camera")
                return

            # Real camera has no perception collaborator, assume facing
            self.feed.set_camera_state(facing_camera=True)

            source_task = asyncio.create_task(self.source.run())
            try:
                await self.engine.start_session()
                await asyncio.sleep(self.duration)
                report = await self.engine.end_session()
            finally:
                source_task.cancel()

            state = self.engine.get_current_state()

        if report is not None:
            self._print_report(report, state["analytics"])

    def _print_notice(self, notice):
        print(f"[{notice.title}] {notice.description}")

    def _print_reading(self, reading, telemetry):
        meter = self.engine.focus_meter.measure(telemetry.attention_score)
        print(
            f"  {reading.state.value:<10} {reading.description:<35} "
            f"focus {meter['percentage']:>3}% ({meter['level'].value}) "
            f"posture {telemetry.posture * 100:>3.0f}% "
            f"distracted {telemetry.time_distracted}s"
        )

    def _print_report(self, report: dict, analytics: dict):
        """Print the final session report."""
        print("\n" + "="*60)
        print("SESSION REPORT")
        print("="*60 + "\n")

        summary = report.get("session_summary", {})
        print(f"Duration: {summary.get('duration_label', '0s')}")

        print("\n" + "-"*40)
        print("FOCUS METRICS")
        print("-"*40)

        metrics = report.get("focus_metrics", {})
        print(f"\nFocus: {metrics.get('focus_percentage', 0):.1f}%")
        print(f"  Rating: {metrics.get('rating', 'N/A')}")
        print(f"Time Distracted: {metrics.get('time_distracted_seconds', 0)}s")

        print(f"\nReadings: {analytics.get('total_readings', 0)}")
        print(f"  Attentive: {analytics.get('attentive_percentage', 0):.1f}%")
        print(f"  Distracted: {analytics.get('distracted_percentage', 0):.1f}%")

        print("\nRecommendations:")
        for i, rec in enumerate(report.get("recommendations", []), 1):
            print(f"  {i}. {rec}")

        print("\n" + "="*60)

        # Also save JSON report
        json_report = json.dumps(report, indent=2, default=str)
        with open("session_report.json", "w") as f:
            f.write(json_report)
        print(f"\nFull report saved to: session_report.json")
        print("="*60 + "\n")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Focus Dashboard Engine demo")
    parser.add_argument("--duration", type=float, default=10.0,
                        help="Session length in seconds")
    parser.add_argument("--camera", action="store_true",
                        help="Use the real webcam instead of a simulated one")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the simulated telemetry")
    parser.add_argument("--log-level", default=config.LOG_LEVEL)
    args = parser.parse_args()

    config.setup_logging(args.log_level)

    demo = FocusDashboardDemo(args.duration, use_camera=args.camera, seed=args.seed)
    try:
        asyncio.run(demo.run())
    except KeyboardInterrupt:
        print("\nInterrupted")


if __name__ == "__main__":
    main()
