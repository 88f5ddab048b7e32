from storefront.utils.pagination import Page, pagination_meta


def success(data, message: str = 'Success') -> dict:
    return {'status': 'success', 'message': message, 'data': data}


def paginated(data, page: Page, total: int, message: str = 'Success') -> dict:
    return {'status': 'success', 'message': message, 'data': data, 'pagination': pagination_meta(page, total)}
