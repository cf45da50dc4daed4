from menu_crawler.drivers.browser import PlaywrightRunDriver

__all__ = ["PlaywrightRunDriver"]
