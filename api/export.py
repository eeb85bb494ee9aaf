# api/export.py
import csv
import io

HEADER = ["payer", "amount", "participants"]


def expenses_to_csv(expenses):
    # Participants are joined with '|' so the column survives a comma split
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(HEADER)
    for expense in expenses:
        writer.writerow([
            expense.payer,
            f"{expense.amount:.2f}",
            "|".join(expense.participants),
        ])
    return buffer.getvalue()
