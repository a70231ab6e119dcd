# src/logic/error_reporter.py

from src.core.models.response import ErroredGroup, ErroredRecord

class ErrorReporter:
    """
    Collects per-record and per-group failures for one request so that a bad
    row or a failing security never aborts the rest of the computation.
    """
    def __init__(self):
        self._errored_records: dict[str, ErroredRecord] = {}
        self._errored_groups: dict[tuple[str, str], ErroredGroup] = {}

    def add_error(self, record_id: str, error_reason: str):
        """
        Adds an error for a specific input record. If an error for the same
        record ID already exists, the new reason is appended to it.
        """
        if record_id in self._errored_records:
            existing_reason = self._errored_records[record_id].error_reason
            if error_reason not in existing_reason: # Avoid duplicate messages
                self._errored_records[record_id].error_reason += f"; {error_reason}"
        else:
            self._errored_records[record_id] = ErroredRecord(
                record_id=record_id,
                error_reason=error_reason
            )

    def add_group_error(self, account_id: str, security_name: str, error_reason: str):
        """
        Records that the ledger replay of one (account, security) group failed.
        """
        key = (account_id, security_name)
        if key in self._errored_groups:
            existing_reason = self._errored_groups[key].error_reason
            if error_reason not in existing_reason:
                self._errored_groups[key].error_reason += f"; {error_reason}"
        else:
            self._errored_groups[key] = ErroredGroup(
                account_id=account_id,
                security_name=security_name,
                error_reason=error_reason
            )

    def get_errors(self) -> list[ErroredRecord]:
        """
        Returns a list of all collected errored records.
        """
        return list(self._errored_records.values())

    def get_group_errors(self) -> list[ErroredGroup]:
        return list(self._errored_groups.values())

    def has_errors(self) -> bool:
        """
        Checks if any errors have been reported.
        """
        return bool(self._errored_records) or bool(self._errored_groups)

    def clear(self):
        """
        Clears all collected errors.
        """
        self._errored_records = {}
        self._errored_groups = {}
