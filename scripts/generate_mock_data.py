import os
import pandas as pd
import numpy as np

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def _random_point(center_lat, center_lon, spread):
    return (
        np.round(center_lat + np.random.uniform(-spread, spread), 5),
        np.round(center_lon + np.random.uniform(-spread, spread), 5),
    )


def _random_time():
    # Bias toward commute hours so the time-of-day bands all get exercised
    hour = np.random.choice(
        [6, 7, 8, 10, 12, 13, 15, 16, 17, 18, 20, 21, 23],
        p=[0.08, 0.1, 0.1, 0.06, 0.08, 0.08, 0.06, 0.1, 0.1, 0.08, 0.06, 0.05, 0.05],
    )
    minute = np.random.choice([0, 15, 30, 45])
    return f"{hour:02d}:{minute:02d}"


def _ride_row(ride_id, center_lat, center_lon):
    origin_lat, origin_lon = _random_point(center_lat, center_lon, 0.5)
    dest_lat, dest_lon = _random_point(center_lat, center_lon, 0.5)
    return {
        "Ride ID": ride_id,
        "Origin Latitude": origin_lat,
        "Origin Longitude": origin_lon,
        "Destination Latitude": dest_lat,
        "Destination Longitude": dest_lon,
        "Distance (miles)": np.round(np.random.uniform(1.0, 25.0), 2),
    }


def generate_mock_datasets(num_historical=100, num_users=10, num_rides=25, output_dir="sampledata"):
    """
    Generates the three datasets the ranking engine loads:
    historical_rides.csv, users.csv and available_rides.csv.

    Rides are scattered around central Pennsylvania so pickup distances land in the
    0-40 mile range the model coefficients were tuned for.
    """
    CENTER_LAT = 40.95
    CENTER_LON = -76.85

    os.makedirs(output_dir, exist_ok=True)

    # 1. Historical rides (time of day + day of week, no schedule)
    historical = []
    for ride_index in range(num_historical):
        row = _ride_row(f"R{ride_index + 1:04d}", CENTER_LAT, CENTER_LON)
        row["Time of Day (24hr)"] = _random_time()
        row["Day of Week"] = np.random.choice(DAYS)
        historical.append(row)

    # 2. Users
    users = []
    for user_index in range(num_users):
        lat, lon = _random_point(CENTER_LAT, CENTER_LON, 0.4)
        users.append({
            "User ID": f"U{user_index + 1:03d}",
            "Current Latitude": lat,
            "Current Longitude": lon,
            "Historical Ride Acceptance Rate": np.round(np.random.beta(5, 2), 2),
        })

    # 3. Available rides (scheduled time)
    available = []
    for ride_index in range(num_rides):
        row = _ride_row(f"A{ride_index + 1:03d}", CENTER_LAT, CENTER_LON)
        row["Scheduled Time (24hr)"] = _random_time()
        available.append(row)

    # 4. Save to CSV (no field contains a comma, so nothing gets quoted)
    outputs = {
        "historical_rides.csv": pd.DataFrame(historical),
        "users.csv": pd.DataFrame(users),
        "available_rides.csv": pd.DataFrame(available),
    }
    for filename, df in outputs.items():
        path = os.path.join(output_dir, filename)
        df.to_csv(path, index=False)
        print(f"✅ Wrote {len(df)} rows to '{path}'")

    print(f"\nAverage historical distance: {outputs['historical_rides.csv']['Distance (miles)'].mean():.2f} miles")


if __name__ == "__main__":
    generate_mock_datasets()
