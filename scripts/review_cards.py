"""
Terminal Review
Runs a review session for one user against the configured card store

Usage:
    python scripts/review_cards.py <user_id>
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from services.exceptions import InvalidRating, UnknownCard
from services.review_session import ReviewSession
from services.spaced_repetition import Rating

PROMPT = "Rate (" + ", ".join(f"{r.value}={r.name.capitalize()}" for r in Rating) + ", q=quit): "


def run_review(user_id):
    """Review every due card of user_id, one prompt per card"""
    app = create_app()

    with app.app_context():
        session = ReviewSession(
            app.extensions['card_service'],
            user_id,
            on_complete=lambda s: print("\n🎉 All due cards reviewed!")
        )
        card = session.start()

        if card is None:
            print(f"No cards due for {user_id}")
            return

        print(f"{session.remaining} card(s) due for {user_id}")

        while not session.is_complete:
            card = session.current
            print("\n" + "=" * 60)
            print(f"  {card.word}")
            if card.context:
                print(f"  ({card.context})")
            input("  [enter] to show answer ")

            session.reveal()
            print(f"  → {card.translation}")

            while True:
                choice = input(PROMPT).strip().lower()
                if choice == 'q':
                    session.abandon()
                    print(f"Stopped after {session.answered} card(s)")
                    return
                try:
                    updated = session.answer(int(choice) if choice.isdigit() else choice)
                except InvalidRating as e:
                    print(f"  {e}")
                    continue
                except UnknownCard:
                    print("  Card was deleted, skipping")
                    break
                print(f"  next due {updated.due:%Y-%m-%d %H:%M} ({updated.state.name.lower()})")
                break

        stats = session.stats
        print("\n" + "=" * 60)
        print(f"Answered {session.answered} card(s)")
        print(f"Total: {stats.total}  Due: {stats.due}  Learning: {stats.learning}  "
              f"Review: {stats.review}  Relearning: {stats.relearning}")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    run_review(sys.argv[1])
