"""
Checkout Simulation Script

Drives many concurrent customers through the cart and checkout flow to
check that carts stay isolated and every placed order adds up.
Run from project root: python scripts/simulate.py

Requires a running API: uvicorn storefront.main:app --port 8001
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from typing import Any

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_CUSTOMERS = 50

STREETS = ["Main St", "Broadway", "5th Avenue", "Park Ave", "Madison Ave", "Lexington Ave", "Amsterdam Ave"]
ORDER_TYPES = ["DELIVERY", "PICKUP", "DINE_IN"]
PAYMENT_METHODS = ["CARD", "GOOGLE_PAY", "APPLE_PAY", "PAYPAL", "CASH"]

# Item id -> option choices that satisfy the item's modifier rules
MENU_CHOICES: dict[str, list[list[str]]] = {
    "item-margherita": [
        ["opt-margherita-regular"],
        ["opt-margherita-large"],
        ["opt-margherita-large", "opt-topping-cheese", "opt-topping-basil"],
    ],
    "item-pepperoni": [["opt-pepperoni-regular"], ["opt-pepperoni-large", "opt-topping-olives"]],
    "item-carbonara": [[]],
    "item-caesar-salad": [[], ["opt-dressing-side"]],
    "item-wings": [["opt-sauce-buffalo"], ["opt-sauce-bbq", "opt-sauce-honey-garlic"]],
    "item-garlic-bread": [[]],
    "item-tiramisu": [[]],
    "item-coke": [[]],
}
INSTRUCTIONS = ["", "", "Extra crispy", "No onions", "Cut in squares"]


def customer_headers(customer_num: int) -> dict[str, str]:
    """Session headers as the auth gateway would forward them."""
    return {
        "x-user-id": f"sim-user-{customer_num:04d}",
        "x-user-email": f"sim{customer_num}@example.com",
        "x-user-role": "CUSTOMER",
        "x-user-phone-verified": "true",
    }


def random_line() -> dict[str, Any]:
    item_id = random.choice(list(MENU_CHOICES))
    return {
        "itemId": item_id,
        "quantity": random.randint(1, 3),
        "selectedOptionIds": random.choice(MENU_CHOICES[item_id]),
        "specialInstructions": random.choice(INSTRUCTIONS),
    }


def random_checkout() -> dict[str, Any]:
    order_type = random.choice(ORDER_TYPES)
    payload: dict[str, Any] = {
        "orderType": order_type,
        "paymentMethod": random.choice(PAYMENT_METHODS),
    }
    if order_type == "DELIVERY":
        payload["deliveryAddress"] = {
            "line1": f"{random.randint(1, 999)} {random.choice(STREETS)}",
            "city": "New York",
            "postalCode": f"100{random.randint(10, 99)}",
        }
    return payload


# =============================================================================
# SINGLE CUSTOMER FLOW
# =============================================================================

async def run_customer(client: httpx.AsyncClient, customer_num: int) -> dict[str, Any]:
    """Fill a cart, preview it and place the order."""
    headers = customer_headers(customer_num)
    start_time = time.time()

    try:
        for _ in range(random.randint(1, 5)):
            response = await client.post(
                f"{API_BASE_URL}/api/cart/items", json=random_line(), headers=headers, timeout=30.0
            )
            response.raise_for_status()

        cart = response.json()["cart"]
        checkout = random_checkout()

        response = await client.patch(
            f"{API_BASE_URL}/api/cart", json={"orderType": checkout["orderType"]}, headers=headers, timeout=30.0
        )
        response.raise_for_status()

        preview = await client.post(
            f"{API_BASE_URL}/api/checkout/preview", json=checkout, headers=headers, timeout=30.0
        )
        if preview.status_code != 200:
            return {
                "customer_num": customer_num,
                "success": False,
                "error": preview.json().get("code", preview.text[:100]),
                "time": round(time.time() - start_time, 3),
            }

        placed = await client.post(
            f"{API_BASE_URL}/api/checkout/place", json=checkout, headers=headers, timeout=30.0
        )
        elapsed = round(time.time() - start_time, 3)

        if placed.status_code != 201:
            return {
                "customer_num": customer_num,
                "success": False,
                "error": placed.text[:100],
                "time": elapsed,
            }

        order = placed.json()["order"]
        return {
            "customer_num": customer_num,
            "success": True,
            "order_id": order["id"],
            "total": order["summary"]["total"],
            "subtotal_matches": order["summary"]["subtotal"] == preview.json()["checkout"]["summary"]["subtotal"],
            "cart_subtotal": cart["subtotal"],
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        return {
            "customer_num": customer_num,
            "success": False,
            "error": str(e)[:100],
            "time": round(time.time() - start_time, 3),
        }


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(num_customers: int = TOTAL_CUSTOMERS) -> dict[str, Any]:
    """
    Run concurrent checkouts.

    Args:
        num_customers: Number of distinct signed-in customers
    """
    print("=" * 70)
    print("🔥 CHECKOUT SIMULATION - CONCURRENT CUSTOMERS")
    print("=" * 70)
    print(f"📋 Customers: {num_customers}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()
    async with httpx.AsyncClient() as client:
        results = await asyncio.gather(*(run_customer(client, i + 1) for i in range(num_customers)))
    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]
    order_ids = [r["order_id"] for r in successful]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Placed Orders: {len(successful)}/{num_customers}")
    print(f"❌ Rejected Checkouts: {len(failed)}/{num_customers}")
    print(f"⏱️  Total Time: {total_time}s")

    if len(set(order_ids)) != len(order_ids):
        print("\n⚠️ Duplicate order ids detected!")
    mismatched = [r for r in successful if not r["subtotal_matches"]]
    if mismatched:
        print(f"\n⚠️ {len(mismatched)} orders differ from their preview subtotal")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        total_revenue = sum(r["total"] for r in successful)
        print("\n📈 Performance Metrics:")
        print(f"   Average Flow: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in successful)}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")
        print(f"   💰 Total Revenue: ${total_revenue:.2f}")

    if failed:
        print("\n⚠️  Rejected Checkout Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Customer #{f['customer_num']}: {f.get('error', 'Unknown error')}")

    print("=" * 70)
    return {
        "total": num_customers,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


async def test_single_flows() -> bool:
    """Check the basic flows before the concurrent run."""
    print("\n" + "=" * 70)
    print("🧪 TESTING INDIVIDUAL FLOWS")
    print("=" * 70)

    async with httpx.AsyncClient() as client:
        print("\n1️⃣ Health Check...")
        response = await client.get(f"{API_BASE_URL}/health")
        if response.status_code != 200:
            print(f"   ❌ Failed: {response.text}")
            return False
        data = response.json()
        print(f"   ✅ Status: {data.get('status')}")
        print(f"   Catalog: {data.get('catalog_service')}")

        print("\n2️⃣ Guest Cart...")
        response = await client.post(
            f"{API_BASE_URL}/api/cart/items",
            json={"itemId": "item-margherita", "quantity": 2, "selectedOptionIds": ["opt-margherita-large"]},
        )
        if response.status_code != 201:
            print(f"   ❌ Failed: {response.text}")
            return False
        cart = response.json()["cart"]
        print(f"   ✅ Subtotal: ${cart['subtotal']:.2f} ({cart['itemCount']} items)")

        print("\n3️⃣ Guest Checkout Is Rejected...")
        response = await client.post(f"{API_BASE_URL}/api/checkout/preview", json={})
        print(f"   {'✅' if response.status_code == 401 else '❌'} {response.json().get('code')}")

        print("\n4️⃣ Modifier Rule Violation...")
        response = await client.post(
            f"{API_BASE_URL}/api/cart/items",
            json={"itemId": "item-margherita", "selectedOptionIds": []},
        )
        print(f"   {'✅' if response.status_code == 400 else '❌'} {response.json().get('code')}")

        print("\n5️⃣ Single Checkout...")
        result = await run_customer(client, 9999)
        if result["success"]:
            print(f"   ✅ Order {result['order_id']} placed")
            print(f"   Total: ${result['total']:.2f}")
        else:
            print(f"   ⚠️ Rejected: {result.get('error')}")

    print("\n" + "=" * 70)
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Checkout Simulation Script")
    parser.add_argument("--customers", type=int, default=TOTAL_CUSTOMERS, help="Number of customers")
    parser.add_argument("--base-url", default=API_BASE_URL, help="API base URL")
    parser.add_argument("--skip-tests", action="store_true", help="Skip individual tests")
    args = parser.parse_args()

    API_BASE_URL = args.base_url.rstrip("/")

    if not args.skip_tests:
        success = asyncio.run(test_single_flows())
        if not success:
            print("\n❌ Pre-flight tests failed. Fix issues before running simulation.")
            sys.exit(1)
        print("\n✅ Pre-flight tests passed!")

    asyncio.run(run_simulation(num_customers=args.customers))
