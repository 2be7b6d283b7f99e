import logging
import os
import statistics
from typing import List

from rides.datasets import load_datasets_from_dir
from rides.errors import RideAcceptanceError
from rides.models import USER_ID
from routing.distance_resolver import build_distance_resolver
from ranking.service import RankingService
from ranking.explanation import ExplanationService


def priority_label(probability: float) -> str:
    if probability > 0.7:
        return "[HIGH]"
    if probability > 0.4:
        return "[MED]"
    return "[LOW]"


def run_report(data_dir="sampledata", top_n=5):
    print("=== RIDE ACCEPTANCE PREDICTION REPORT ===")

    # Resolve the correct path depending on where the user runs the script from.
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    datasets = load_datasets_from_dir(os.path.join(base_dir, data_dir))

    # Use the live provider only when a key is configured; Haversine otherwise.
    offline = not os.getenv("GOOGLE_MAPS_API_KEY")
    resolver = build_distance_resolver(offline=offline)

    service = RankingService(datasets, resolver)
    explainer = ExplanationService(service)

    print(f"Loaded {len(datasets.historical)} historical rides, {len(datasets.users)} users "
          f"and {len(datasets.available)} available rides.")
    print(f"Distance source: {'Haversine (offline)' if offline else 'Google Distance Matrix'}\n")

    all_probabilities: List[float] = []
    top_probabilities: List[float] = []

    for row in datasets.users:
        user_id = row.get(USER_ID)
        print("=" * 80)
        print(f"User {user_id}")
        try:
            user = service.get_user(user_id)
            print(f"   Location: ({user.location[0]}, {user.location[1]})")
            print(f"   Historical Acceptance Rate: {user.acceptance_rate * 100:.1f}%")

            result = service.score_candidates(user_id)
            recommendations = result.ranked[:top_n]
            for failure in result.failures:
                print(f"   [SKIPPED] Ride {failure.ride_id}: {failure.error}")

            if not recommendations:
                print("   No ride recommendations available")
                continue

            print(f"\n   Top {len(recommendations)} Ride Recommendations:")
            for index, rec in enumerate(recommendations, 1):
                all_probabilities.append(rec.probability)
                print(f"   {index}. {priority_label(rec.probability)} Ride {rec.ride_id}: "
                      f"{rec.probability * 100:.1f}% probability")
                print(f"      Distance: {rec.ride.distance_miles} miles | Time: {rec.ride.scheduled_time or 'N/A'} | "
                      f"From User: {rec.features.distance_from_user:.1f} miles")

            top = recommendations[0]
            top_probabilities.append(top.probability)
            print(f"\n   Analysis of Top Recommendation ({top.ride_id}):")
            for line in explainer.explain(user_id, top.ride_id).summary_lines():
                print(f"      {line}")

        except RideAcceptanceError as e:
            print(f"   Error generating predictions: {e}")

    print("\n" + "=" * 80)
    print("OVERALL ANALYSIS")
    print("=" * 80)
    if not all_probabilities:
        print("No predictions generated.")
        return

    high = sum(1 for p in all_probabilities if p > 0.7)
    medium = sum(1 for p in all_probabilities if 0.4 < p <= 0.7)
    low = len(all_probabilities) - high - medium

    print(f"Predictions: {len(all_probabilities)}")
    print(f"Average probability: {statistics.mean(all_probabilities) * 100:.1f}%")
    print(f"Range: {min(all_probabilities) * 100:.1f}% - {max(all_probabilities) * 100:.1f}%")
    print(f"Average top recommendation: {statistics.mean(top_probabilities) * 100:.1f}%")
    print(f"Distribution: {high} high / {medium} medium / {low} low")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    run_report()
