"""
Contract ABIs used for read calls.

Write calls are encoded with ``utils.encode_function_call``.
"""


def _view(name, inputs, output_type="uint256"):
    return {
        "inputs": [{"internalType": t, "name": n, "type": t} for n, t in inputs],
        "name": name,
        "outputs": [{"internalType": output_type, "name": "", "type": output_type}],
        "stateMutability": "view",
        "type": "function",
    }


ERC20_ABI = [
    _view("balanceOf", [("account", "address")]),
    _view("allowance", [("owner", "address"), ("spender", "address")]),
    _view("decimals", [], "uint8"),
]

BEEFY_VAULT_ABI = [
    _view("balanceOf", [("account", "address")]),
    _view("getPricePerFullShare", []),
    _view("pricePerShare", []),
    _view("want", [], "address"),
]

ERC4626_ABI = [
    _view("balanceOf", [("account", "address")]),
    _view("convertToAssets", [("shares", "uint256")]),
    _view("asset", [], "address"),
]

SMART_WALLET_FACTORY_ABI = [
    {
        "inputs": [
            {"internalType": "bytes[]", "name": "owners", "type": "bytes[]"},
            {"internalType": "uint256", "name": "nonce", "type": "uint256"},
        ],
        "name": "getAddress",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
]

ENTRY_POINT_ABI = [
    _view("getNonce", [("sender", "address"), ("key", "uint192")]),
]
