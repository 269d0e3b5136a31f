import pytest


@pytest.fixture
def tickets():
    return [
        {
            "id": 1,
            "order": 10,
            "status": "pending",
            "refund_status": "none",
            "passport_name": "Ada Lovelace",
            "facebook_name": "ada.l",
            "member_code": "M-001",
            "priority_date": "2024-05-01",
            "fst_pt": "yes",
        },
        {
            "id": 2,
            "order": "ORD-2024-00011",
            "status": "Paid",
            "refund_status": "none",
            "customer_payment": "1500",
            "payment_date": "2024-05-03",
        },
        {
            "id": 3,
            "order": 12,
            "status": "cancel",
            "refund_status": "in_process",
            "customer_payment": "900",
        },
        {"id": 4, "order": None, "status": "complete", "zone": "A", "row": "3", "seat": "14"},
    ]


@pytest.fixture
def orders():
    return [
        {"id": 10, "customer": 5},
        {"id": "11", "customer": "CUST-6"},
        {"id": 12, "customer": 99},
    ]


@pytest.fixture
def customers():
    return [
        {"id": 5, "email": "a@x.com"},
        {"id": 6, "email": "b@x.com"},
    ]
