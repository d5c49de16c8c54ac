"""
Drivers package
---------------
Adapters that implement the `WebDriver` protocol for concrete browser
clients. Import the one you need so only its client library is loaded:

  from elementquery.drivers.playwright import PlaywrightDriver
  from elementquery.drivers.selenium import SeleniumDriver   # needs the `selenium` extra
"""

__all__: list[str] = []
