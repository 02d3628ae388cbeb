"""Pytest configuration and fixtures for arch-idl tests."""

from pathlib import Path

import pytest

PROGRAM_SOURCE = '''//! Sample vault program for testing.
use borsh::{BorshDeserialize, BorshSerialize};

/// Move lamports out of the vault.
#[derive(BorshSerialize, BorshDeserialize, Debug)]
pub struct TransferParams {
    pub amount: u64,
    pub memo: Vec<u8>,
}

#[derive(BorshSerialize, BorshDeserialize)]
pub struct MintParams {
    pub Recipient: Pubkey,
    pub tags: Vec<String>,
}

pub struct VaultState {
    pub owner: Pubkey,
    pub balance: u64,
    pub history: Vec<u64>,
}

#[derive(BorshSerialize, BorshDeserialize)]
pub enum Op {
    Noop,
    Transfer(u64, u64),
    Mint { amount: u64 },
}

pub fn entrypoint(program_id: &Pubkey, accounts: &[AccountInfo], data: &[u8]) -> Result<(), ProgramError> {
    let account = &accounts[0];
    assert!(account.is_writable);
    assert!(account.is_signer);
    if data.len() > 64 {
        return Err(ProgramError::Custom(6001));
    }
    Ok(())
}
'''

NAMED_PROGRAM_SOURCE = '''
mod counter {
    pub struct Counter {
        pub count: u32,
    }

    pub fn process_instruction(program_id: &Pubkey, data: &[u8]) -> ProgramResult {
        Ok(())
    }
}
'''


@pytest.fixture
def program_source() -> str:
    """Rust source of a small program with instructions, accounts, types and errors."""
    return PROGRAM_SOURCE


@pytest.fixture
def named_program_source() -> str:
    """Rust source whose program name comes from its module."""
    return NAMED_PROGRAM_SOURCE


@pytest.fixture
def program_file(tmp_path: Path) -> Path:
    """The sample program written to disk."""
    source_file = tmp_path / "src" / "lib.rs"
    source_file.parent.mkdir(parents=True)
    source_file.write_text(PROGRAM_SOURCE, encoding="utf-8")
    return source_file


@pytest.fixture
def temp_config_dir(tmp_path: Path) -> Path:
    """Create an isolated config directory for testing."""
    config_dir = tmp_path / ".arch-idl"
    config_dir.mkdir(parents=True)
    return config_dir
