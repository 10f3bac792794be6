"""
Currency lists shared by several adapters.
"""

# ECB reference rates (also republished by Frankfurter and BNB)
ECB_CURRENCIES = (
    "AUD", "BRL", "CAD", "CHF", "CNY", "CZK", "DKK", "GBP", "HKD", "HUF", "IDR", "ILS", "INR",
    "ISK", "JPY", "KRW", "MXN", "MYR", "NOK", "NZD", "PHP", "PLN", "RON", "SEK", "SGD", "THB",
    "TRY", "USD", "ZAR",
)

# Commercial APIs quoting the full ISO 4217 set
WORLD_CURRENCIES = (
    "AED", "AFN", "ALL", "AMD", "ANG", "AOA", "ARS", "AUD", "AWG", "AZN", "BAM", "BBD", "BDT",
    "BGN", "BHD", "BIF", "BMD", "BND", "BOB", "BRL", "BSD", "BTC", "BTN", "BWP", "BYN", "BZD",
    "CAD", "CDF", "CHF", "CLF", "CLP", "CNH", "CNY", "COP", "CRC", "CUC", "CUP", "CVE", "CZK",
    "DJF", "DKK", "DOP", "DZD", "EGP", "ERN", "ETB", "EUR", "FJD", "FKP", "GBP", "GEL", "GGP",
    "GHS", "GIP", "GMD", "GNF", "GTQ", "GYD", "HKD", "HNL", "HRK", "HTG", "HUF", "IDR", "ILS",
    "IMP", "INR", "IQD", "IRR", "ISK", "JEP", "JMD", "JOD", "JPY", "KES", "KGS", "KHR", "KMF",
    "KPW", "KRW", "KWD", "KYD", "KZT", "LAK", "LBP", "LKR", "LRD", "LSL", "LYD", "MAD", "MDL",
    "MGA", "MKD", "MMK", "MNT", "MOP", "MRU", "MUR", "MVR", "MWK", "MXN", "MYR", "MZN", "NAD",
    "NGN", "NIO", "NOK", "NPR", "NZD", "OMR", "PAB", "PEN", "PGK", "PHP", "PKR", "PLN", "PYG",
    "QAR", "RON", "RSD", "RUB", "RWF", "SAR", "SBD", "SCR", "SDG", "SEK", "SGD", "SHP", "SLE",
    "SLL", "SOS", "SRD", "SSP", "STD", "STN", "SVC", "SYP", "SZL", "THB", "TJS", "TMT", "TND",
    "TOP", "TRY", "TTD", "TWD", "TZS", "UAH", "UGX", "USD", "UYU", "UZS", "VES", "VND", "VUV",
    "WST", "XAF", "XAG", "XAU", "XCD", "XCG", "XDR", "XOF", "XPD", "XPF", "XPT", "YER", "ZAR",
    "ZMW", "ZWL",
)

CRYPTO_CURRENCIES = (
    "BTC", "ETH", "XRP", "LTC", "BCH", "ADA", "DOT", "LINK", "BNB", "XLM", "USDT", "USDC", "DOGE",
    "UNI", "EOS", "TRX", "NEO", "DASH", "ETC", "XEM", "ATOM", "XMR", "CRO", "ALGO", "XTZ", "AVAX",
    "SOL", "MATIC", "SHIB", "FIL", "VET", "ICP", "THETA", "DAI", "AXS", "EGLD", "MANA", "NEAR",
    "SAND", "AAVE", "CAKE", "GRT", "HBAR", "BSV", "MKR", "STX", "FLOW", "QNT", "RUNE", "ZEC",
    "HNT", "ENJ", "HOT", "SUSHI", "CELO", "CHZ", "COMP", "SNX", "YFI", "ZIL", "QTUM", "BAT",
    "BTG", "DCR", "RVN", "WAVES", "ICX", "ONT", "ZRX", "OMG", "ANKR", "ZEN", "IOST", "SC", "DGB",
    "XVG", "BTT", "NANO", "LSK",
)
