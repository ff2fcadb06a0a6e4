import argparse
import csv

import numpy as np

# Lower Manhattan, the same pickup the dispatch tests use.
BASE_LAT = 40.7128
BASE_LNG = -74.0060


def generate_mock_drivers(filename="mock_drivers_100.csv", count=100, seed=None):
    rng = np.random.default_rng(seed)

    # Scatter drivers around the centre (roughly +/- 12 km)
    lats = BASE_LAT + (rng.random(count) - 0.5) * 0.22
    lngs = BASE_LNG + (rng.random(count) - 0.5) * 0.28

    # 80% online, 90% verified, 5% never reported a location
    online = rng.random(count) < 0.8
    verified = rng.random(count) < 0.9
    located = rng.random(count) >= 0.05

    with open(filename, mode='w', newline='') as file:
        writer = csv.writer(file)
        writer.writerow(["driver_id", "lat", "lng", "is_online", "is_verified"])

        for i in range(count):
            driver_id = f"DRV-{str(i + 1).zfill(3)}"
            lat = round(float(lats[i]), 6) if located[i] else ""
            lng = round(float(lngs[i]), 6) if located[i] else ""
            writer.writerow([driver_id, lat, lng, int(online[i]), int(verified[i])])

    print(f"Successfully generated {count} mock drivers into '{filename}'.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate a CSV of mock driver presence rows.")
    parser.add_argument("--output", default="mock_drivers_100.csv")
    parser.add_argument("--count", type=int, default=100)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()
    generate_mock_drivers(args.output, args.count, args.seed)
