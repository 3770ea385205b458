"""Load inventory.dk in memory and exercise the generated records."""

import dataclasses
from pathlib import Path

from derivekit.generator import load

records = load((Path(__file__).parent / "inventory.dk").read_text(), name="inventory")
Sku = records["Sku"]
StockLevel = records["StockLevel"]
Shipment = records["Shipment"]

sku = Sku("acme", 1042)
match sku:
    case Sku(vendor, code):
        print(f"{vendor}:{code}")
print({sku: "widget"}[Sku("acme", 1042)])

low = StockLevel(1042, 3, notes=["reorder"])
high = StockLevel(1042, 30, 5)
print(low, low < high, list(high), len(high))
print(low._replace(onHand=12)._asdict())

shipment = Shipment._make(["ups", "air", None])
print(shipment, Shipment._field_defaults)
print([f.name for f in dataclasses.fields(Shipment)])
