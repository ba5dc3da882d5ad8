#!/usr/bin/env python3
import argparse
from datetime import date

import requests

from bid_estimator.settings import settings


def get_bid_forecast(start_date, period_count, frequency, client_type, win_threshold, seed=None, base_url=None):
    """
    Get the simulated bid forecast for every project type

    Args:
        start_date (str): First forecast date (YYYY-MM-DD)
        period_count (int): Number of periods to forecast
        frequency (str): 'Days', 'Weeks' or 'Months'
        client_type (str): 'Existing' or 'New'
        win_threshold (float): Probability at or above which a bid counts as a win
        seed (int): Optional seed for a reproducible forecast

    Returns:
        dict: The forecast response
    """
    params = {
        "start_date": start_date,
        "period_count": period_count,
        "frequency": frequency,
        "client_type": client_type,
        "win_threshold": win_threshold,
    }
    if seed is not None:
        params["seed"] = seed

    try:
        response = requests.get(f"{base_url or settings.api_base_url}/forecasts", params=params, timeout=30)
        response.raise_for_status()  # Raise exception for error status codes
        return response.json()
    except requests.exceptions.RequestException as e:
        print(f"Error fetching forecast: {e}")
        return None


def get_ohp_estimate(target_amount, base_url=None):
    """Get the recommended OH&P for a target contract amount"""
    try:
        response = requests.get(
            f"{base_url or settings.api_base_url}/ohp/estimate",
            params={"target_amount": target_amount},
            timeout=30,
        )
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        print(f"Error fetching OH&P estimate: {e}")
        return None


def format_forecast_as_string(forecast_data):
    """
    Format the forecast data as a readable table

    Args:
        forecast_data (dict): The forecast response from the API

    Returns:
        str: Formatted string representation of the forecast
    """
    if not forecast_data or not forecast_data.get('rows'):
        return "No forecast data available"

    request = forecast_data['request']
    result = [f"Bid Forecast for {request['client_type']} clients (threshold {request['win_threshold']})"]
    result.append("=" * 72)
    result.append(f"{'Category':<14} | {'Date':<10} | {'Win Prob.':>9} | {'Predicted Amount':>18} | {'Result':<6}")
    result.append("-" * 72)

    for row in forecast_data['rows']:
        amount = f"{row['predicted_amount']:,.2f}"
        result.append(
            f"{row['category']:<14} | {row['date']:<10} | {row['predicted_win_probability']:>9.3f} | {amount:>18} | {row['result']:<6}"
        )

    return "\n".join(result)


def format_ohp_as_string(ohp_data):
    if not ohp_data:
        return "No OH&P estimate available"
    estimate = ohp_data['estimate']
    return (
        f"Target amount:      ${estimate['target_amount']:,.2f}\n"
        f"Recommended OH&P:   {estimate['predicted_percent']:.2f}%\n"
        f"OH&P dollar value:  ${estimate['predicted_dollar_value']:,.2f}"
    )


def main():
    parser = argparse.ArgumentParser(description="Fetch a bid forecast and OH&P estimate from the API.")
    parser.add_argument("--start-date", default=date.today().isoformat())
    parser.add_argument("--periods", type=int, default=6)
    parser.add_argument("--frequency", default="Months", choices=["Days", "Weeks", "Months"])
    parser.add_argument("--client-type", default="Existing", choices=["Existing", "New"])
    parser.add_argument("--threshold", type=float, default=0.5)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--target-amount", type=float, default=1_000_000)
    args = parser.parse_args()

    print(f"Fetching {args.frequency.lower()} forecast for the next {args.periods} periods...")
    forecast_data = get_bid_forecast(
        args.start_date, args.periods, args.frequency, args.client_type, args.threshold, seed=args.seed
    )
    print(format_forecast_as_string(forecast_data))

    print()
    print(format_ohp_as_string(get_ohp_estimate(args.target_amount)))


if __name__ == "__main__":
    main()
