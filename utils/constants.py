from typing import Dict, Any

# Supported networks (user-facing name -> provider identifiers)
NETWORKS: Dict[str, Dict[str, Any]] = {
    'ethereum': {
        'name': 'Ethereum',
        'chainbase_network_id': 'ethereum-mainnet',
        'chain_id': 1,
        'symbol': 'ETH',
    },
    'base': {
        'name': 'Base',
        'chainbase_network_id': 'base-mainnet',
        'chain_id': 8453,
        'symbol': 'ETH',
    },
    'optimism': {
        'name': 'Optimism',
        'chainbase_network_id': 'optimism-mainnet',
        'chain_id': 10,
        'symbol': 'ETH',
    },
    'arbitrum': {
        'name': 'Arbitrum',
        'chainbase_network_id': 'arbitrum-mainnet',
        'chain_id': 42161,
        'symbol': 'ETH',
    },
}

# Parameter shapes
ADDRESS_HEX_LENGTH = 42      # 0x + 20 bytes
TX_HASH_HEX_LENGTH = 66      # 0x + 32 bytes
EMPTY_CODE = '0x'
ENS_SUFFIX = '.eth'
BASENAME_SUFFIX = '.base.eth'

# JSON-RPC
LATEST_BLOCK = 'latest'
WEI_DECIMALS = 18

UNKNOWN_COMPILER = 'Unknown'
UNAVAILABLE = 'unavailable'

# Description templates (same wording as the Frame replies)
MESSAGE_TEMPLATES: Dict[str, str] = {
    'eoa': "Its balance is {balance} {symbol}, it has {tx_count} txs, and the last one was {last_tx}",
    'ens': "The balance of this ENS is {balance} {symbol}, it has {tx_count} transactions, and the last one was {last_tx}",
    'basename': "The balance of this Basename is {balance} {symbol}, it has {tx_count} transactions, and the last one was {last_tx}",
    'unresolved_name': "Unable to resolve {name}. Check the name and try again.",
    'contract': "{name} is {article} {standard} contract with {token_count} tokens. It has {tx_count} txs, deployed from {deployer} at {deployed_at}. Compiler: {compiler}.",
    'tx_header': "Tx on {network} ({status}): ",
    'tx_between': "Tx between {sender} and {receiver}. ",
    'tx_sent': "{amount} sent to {receiver}. ",
    'tx_gas': "Gas used: {gas_used} units.",
    'tx_unavailable': "Unable to fetch tx details. Check hash and network.",
    'invalid': "Could not classify this parameter. Send an address, tx hash, ENS name or Basename.",
}

# Intro text for the cast reply, keyed by parameter kind
CAST_INTROS: Dict[str, str] = {
    'eoa': "Here's some data about this External Owned Account (EOA):",
    'contract': "Here's some data about this Contract Address:",
    'tx': "Here's some data about this Transaction:",
    'ens': "Here's some data about this ENS name:",
    'basename': "Here's some data about this Basename:",
}

HOOK_ROUTE = 'HOOK-SETUP'

# Webhook status messages
HOOK_STATUS_MESSAGES: Dict[str, str] = {
    'analyze_text': f"{HOOK_ROUTE} => CAST TEXT COMPLY WITH THE PATTERN.",
    'cast_success': f"{HOOK_ROUTE} => CAST SENT SUCCESSFULLY",
    'cast_error': f"{HOOK_ROUTE} => FAILED TO PUBLISH CAST",
    'unexpected_error': f"{HOOK_ROUTE} => POINT SHOULD NOT BE REACHED, CHECK NEYNAR HOOK",
}
