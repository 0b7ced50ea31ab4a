# sales/models/receipt_sequence.py

"""
RECEIPT SEQUENCE

Single-row counter that issues canonical receipt numbers (RCP-000001, ...).

Rules:
- Only next_receipt_no() moves the counter.
- The row is locked (select_for_update) while incrementing, so two
  concurrent commits never share a receipt number.
"""

from django.db import models, transaction

RECEIPT_PREFIX = "RCP"


class ReceiptSequence(models.Model):
    SINGLETON_ID = 1

    id = models.PositiveSmallIntegerField(primary_key=True, default=SINGLETON_ID)
    last_number = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Receipt sequence"

    @staticmethod
    def format(number: int) -> str:
        return f"{RECEIPT_PREFIX}-{number:06d}"

    @classmethod
    def next_receipt_no(cls) -> str:
        with transaction.atomic():
            cls.objects.get_or_create(pk=cls.SINGLETON_ID)
            seq = cls.objects.select_for_update().get(pk=cls.SINGLETON_ID)
            seq.last_number += 1
            seq.save(update_fields=["last_number", "updated_at"])
            return cls.format(seq.last_number)

    def __str__(self):
        return f"Receipt sequence at {self.format(self.last_number)}"
