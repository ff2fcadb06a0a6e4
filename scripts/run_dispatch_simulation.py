"""
End-to-end dispatch simulation over the in-memory stores.

1. Load driver presence from a CSV (see generate_mock_drivers.py)
2. Riders request rides around the city
3. Every offered driver races to accept at the same moment, exactly one wins per ride
4. Winners drive to pickup and dropoff (straight-line movement), start and complete
5. Results are summarised with pandas and written next to the script
"""

import argparse
import csv
import os
import random
import sys
import threading
from concurrent.futures import ThreadPoolExecutor

import pandas as pd

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common.exceptions import AuthorizationError, ConflictError, ValidationError  # noqa: E402
from common.settings import configure_logging, get_settings  # noqa: E402
from dispatch.dispatcher import Dispatcher  # noqa: E402
from dispatch.events import InMemoryNotificationService  # noqa: E402
from drivers.presence import PresenceStore  # noqa: E402
from pricing.estimator import FareEstimator  # noqa: E402
from rides.models import RideClass  # noqa: E402
from routing.geo import Location, haversine_distance_km, simulate_driver_movement  # noqa: E402
from routing.route_service import RouteService  # noqa: E402


BASE_LAT = 40.7128
BASE_LNG = -74.0060


def load_presence(filepath: str) -> PresenceStore:
    store = PresenceStore()
    with open(filepath, 'r') as file:
        reader = csv.DictReader(file)
        for row in reader:
            driver_id = row['driver_id']
            store.register(driver_id, is_verified=row['is_verified'] == "1")
            store.set_online(driver_id, row['is_online'] == "1")
            if row['lat'] and row['lng']:
                store.update_location(driver_id, Location.parse(row['lat'], row['lng'], 'driver location'))
    return store


def random_point(spread: float = 0.1) -> Location:
    return Location(
        BASE_LAT + (random.random() - 0.5) * spread,
        BASE_LNG + (random.random() - 0.5) * spread,
    )


def race_for_ride(dispatcher: Dispatcher, ride_id: str, driver_ids):
    """
    Every offered driver hits Accept at the same instant. Returns (winner, losers).
    """
    barrier = threading.Barrier(len(driver_ids))

    def attempt(driver_id):
        barrier.wait()
        try:
            dispatcher.accept_ride(ride_id, driver_id)
            return driver_id
        except (ConflictError, AuthorizationError):
            return None

    with ThreadPoolExecutor(max_workers=len(driver_ids)) as pool:
        results = list(pool.map(attempt, driver_ids))

    winners = [r for r in results if r is not None]
    return (winners[0] if winners else None), len(results) - len(winners)


def drive_to(dispatcher: Dispatcher, driver_id: str, target: Location, tick_seconds: float = 30.0) -> int:
    """
    Push simulated location updates until the driver reaches `target`. Returns ticks taken.
    """
    ticks = 0
    while True:
        current = dispatcher.presence.get(driver_id).last_location
        if haversine_distance_km(current, target) < 0.01:
            return ticks
        dispatcher.update_driver_location(driver_id, simulate_driver_movement(current, target, tick_seconds))
        ticks += 1


def run_simulation(drivers_csv: str, ride_count: int, max_racers: int):
    print("=== STARTING END-TO-END DISPATCH SIMULATION ===")

    presence = load_presence(drivers_csv)
    print(f"Loaded {len(presence.all())} drivers, {len(presence.eligible())} eligible.\n")

    notifier = InMemoryNotificationService()
    dispatcher = Dispatcher(
        presence=presence,
        estimator=FareEstimator(RouteService.from_settings(get_settings())),
        notifier=notifier,
    )

    rows = []
    for i in range(ride_count):
        rider_id = f"RDR-{str(i + 1).zfill(3)}"
        ride_class = random.choice(list(RideClass))
        try:
            ride = dispatcher.request_ride(rider_id, random_point(), random_point(), ride_class)
        except ValidationError as exc:
            rows.append({"rider_id": rider_id, "ride_class": ride_class.value, "outcome": f"rejected: {exc.message}"})
            continue

        racers = list(ride.offered_driver_ids[:max_racers])
        row = {
            "rider_id": rider_id,
            "ride_id": ride.id,
            "ride_class": ride_class.value,
            "distance_km": ride.distance_km,
            "fare": ride.fare,
            "offered": len(ride.offered_driver_ids),
        }

        if not racers:
            dispatcher.cancel_ride(ride.id, rider_id)
            rows.append({**row, "outcome": "no drivers available"})
            continue

        winner, lost = race_for_ride(dispatcher, ride.id, racers)
        if winner is None:
            rows.append({**row, "outcome": "no accept"})
            continue

        pickup_ticks = drive_to(dispatcher, winner, ride.pickup)
        dispatcher.start_ride(ride.id, winner)
        trip_ticks = drive_to(dispatcher, winner, ride.dropoff)
        dispatcher.complete_ride(ride.id, winner)

        rows.append({
            **row,
            "driver_id": winner,
            "lost_races": lost,
            "pickup_ticks": pickup_ticks,
            "trip_ticks": trip_ticks,
            "outcome": "completed",
        })

    results = pd.DataFrame(rows)

    base_dir = os.path.dirname(os.path.abspath(__file__))
    output_path = os.path.join(base_dir, "dispatch_results.csv")
    results.to_csv(output_path, index=False)

    print("\n--- Outcomes ---")
    print(results["outcome"].value_counts().to_string())

    completed = results[results["outcome"] == "completed"]
    if not completed.empty:
        print("\n--- Fares by class ---")
        print(completed.groupby("ride_class")["fare"].agg(["count", "mean", "min", "max"]).round(2).to_string())
        print(f"\nAccept races lost (ConflictError): {int(completed['lost_races'].sum())}")

    print(f"\nEvents published: {len(notifier.events)}")
    print("\n=== SIMULATION COMPLETE ===")
    print(f"Results written to '{output_path}'.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run an in-memory dispatch simulation.")
    parser.add_argument("--drivers", default="mock_drivers_100.csv")
    parser.add_argument("--rides", type=int, default=30)
    parser.add_argument("--racers", type=int, default=5)
    args = parser.parse_args()

    configure_logging("WARNING")
    run_simulation(args.drivers, args.rides, args.racers)
