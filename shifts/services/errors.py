from station_mgmt.exceptions import Conflict, StationError


class ShiftClosed(StationError):
    default_message = "Shift is completed or cancelled and can no longer be changed"


class InvalidTransition(StationError):
    default_message = "Only active shifts can change status"


class DuplicateBillNumber(StationError):
    default_message = "Bill number already exists"


class DuplicateShift(Conflict):
    default_message = "An identical shift was just created"


class OperatorBusy(StationError):
    default_message = "This operator already has an active shift"


class CreditSaleRequiresDebtor(StationError):
    default_message = "A credit sale requires a debtor"


class InvalidSaleItems(StationError):
    default_message = "Some products are invalid or inactive"
