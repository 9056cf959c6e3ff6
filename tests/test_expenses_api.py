def test_create_list_delete_expense(client):
    first = client.post("/api/v1/expenses", json={"description": "Laundry", "amount": 450, "date": "2024-01-03"})
    second = client.post("/api/v1/expenses", json={"description": "Electricity", "amount": 2100.5, "category": "Utilities", "date": "2024-01-10"})
    assert first.status_code == 201 and second.status_code == 201
    assert first.json()["category"] == "General"

    listed = client.get("/api/v1/expenses").json()
    assert [e["description"] for e in listed] == ["Electricity", "Laundry"]
    assert listed[0]["amount"] == 2100.5

    assert client.delete(f"/api/v1/expenses/{first.json()['id']}").status_code == 204
    assert [e["description"] for e in client.get("/api/v1/expenses").json()] == ["Electricity"]


def test_expense_defaults_to_today(client):
    from datetime import date

    body = client.post("/api/v1/expenses", json={"description": "Soap", "amount": 60}).json()
    assert body["date"] == date.today().isoformat()


def test_expense_validation(client):
    assert client.post("/api/v1/expenses", json={"description": "Free", "amount": 0}).status_code == 422
    assert client.post("/api/v1/expenses", json={"amount": 10}).status_code == 422
    assert client.post("/api/v1/expenses", json={"description": "   ", "amount": 10}).status_code == 400


def test_delete_missing_expense_is_404(client):
    assert client.delete("/api/v1/expenses/42").status_code == 404
