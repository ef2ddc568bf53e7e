import argparse
import os
import sys
import tempfile
import threading
import time

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from campuspulse.app import PulseApp
from campuspulse.config import PulseConfig


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--viewers", type=int, default=5, help="Dashboard subscribers.")
    parser.add_argument("--submitters", type=int, default=4, help="Feedback threads.")
    parser.add_argument("--per-submitter", type=int, default=25, help="Feedback each.")
    parser.add_argument("--cap", type=int, default=50, help="Max feedback per session.")
    args = parser.parse_args()

    with tempfile.TemporaryDirectory() as tmp:
        config = PulseConfig(data_dir=tmp)
        config.storage.max_feedback_per_session = args.cap
        app = PulseApp(config)
        code = app.repository.create_session("Diagnostics").code
        print(f"Session: {code}")

        counts = [0] * args.viewers
        subscriptions = [app.subscribe(code) for _ in range(args.viewers)]

        def _view(index: int) -> None:
            for _update in subscriptions[index]:
                counts[index] += 1

        def _submit(index: int) -> None:
            for n in range(args.per_submitter):
                app.submit_feedback(code, 1 + (n % 5), f"good {index}")

        viewers = [threading.Thread(target=_view, args=(i,)) for i in range(args.viewers)]
        submitters = [
            threading.Thread(target=_submit, args=(i,)) for i in range(args.submitters)
        ]
        started = time.time()
        for thread in viewers + submitters:
            thread.start()
        for thread in submitters:
            thread.join()
        for subscription in subscriptions:
            subscription.close()
        for thread in viewers:
            thread.join()
        elapsed = time.time() - started

        summary = app.repository.get_summary(code)
        print(f"Submitted: {args.submitters * args.per_submitter}")
        print(f"Retained: {summary.total_responses}")
        print(f"Delivered per viewer: {counts}")
        print(f"Elapsed: {elapsed:.2f}s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
